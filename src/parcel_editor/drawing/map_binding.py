"""
Map binding - Scoped access to the host map's projection and gesture switches

The controller receives one MapGestureService at construction. The host
binds itself when its map is ready and unbinds on teardown; unbinding
always hands gestures back to the host first.
"""

import logging
from typing import Optional, Protocol, Tuple

from ..calculations.coordinate_converter import Position

logger = logging.getLogger(__name__)


class MapHost(Protocol):
    """What the editor needs from the map rendering host."""

    def pixel_for_coordinate(self, position: Position) -> Tuple[float, float]: ...

    def set_gestures_enabled(self, enabled: bool) -> None: ...


class MapGestureService:
    """Bind/unbind-scoped wrapper around a MapHost"""

    def __init__(self, host: Optional[MapHost] = None):
        self._host: Optional[MapHost] = None
        self._gestures_suspended = False
        if host is not None:
            self.bind(host)

    @property
    def is_bound(self) -> bool:
        return self._host is not None

    @property
    def gestures_suspended(self) -> bool:
        return self._gestures_suspended

    def bind(self, host: MapHost) -> None:
        if self._host is not None and self._host is not host:
            self.unbind()
        self._host = host
        logger.debug("Map service bound to %r", host)

    def unbind(self) -> None:
        if self._host is None:
            return
        self.restore_gestures()
        self._host = None
        logger.debug("Map service unbound")

    def pixel_for_coordinate(self, position: Position) -> Tuple[float, float]:
        if self._host is None:
            raise RuntimeError("Map not bound, cannot project coordinates")
        return self._host.pixel_for_coordinate(position)

    def suspend_gestures(self) -> None:
        """Stop the host from panning/zooming/rotating while a handle is dragged."""
        if self._host is None:
            logger.warning("Map not bound, cannot disable gestures")
            return
        try:
            self._host.set_gestures_enabled(False)
            self._gestures_suspended = True
        except Exception as e:
            logger.warning("Failed to disable map gestures: %s", e)

    def restore_gestures(self) -> None:
        """Re-enable host gestures. Safe to call repeatedly."""
        if self._host is None:
            self._gestures_suspended = False
            return
        try:
            self._host.set_gestures_enabled(True)
        except Exception as e:
            logger.warning("Failed to restore map gestures: %s", e)
        finally:
            self._gestures_suspended = False
