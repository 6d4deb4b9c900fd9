"""
Debounced updates - Single-slot, latest-write-wins scheduler backed by QTimer
"""

from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QTimer

from ..calculations.parcel_constants import DRAG_UPDATE_DEBOUNCE_MS


class DebouncedUpdate(QObject):
    """Coalesce rapid values into one applied update.

    ``schedule`` overwrites any pending value and restarts the timer, so only
    the latest value is ever applied. ``flush`` applies the pending value
    synchronously and ``cancel`` discards it.
    """

    _EMPTY = object()

    def __init__(self, callback: Callable[[Any], None], delay_ms: int = DRAG_UPDATE_DEBOUNCE_MS,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._callback = callback
        self._pending = self._EMPTY
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(delay_ms)))
        self._timer.timeout.connect(self.flush)

    @property
    def delay_ms(self) -> int:
        return self._timer.interval()

    @property
    def is_pending(self) -> bool:
        return self._pending is not self._EMPTY

    def schedule(self, value: Any) -> None:
        self._pending = value
        # start() on an active timer restarts it
        self._timer.start()

    def flush(self) -> bool:
        """Apply the pending value now. Returns False when nothing was pending."""
        self._timer.stop()
        if self._pending is self._EMPTY:
            return False
        value = self._pending
        self._pending = self._EMPTY
        self._callback(value)
        return True

    def cancel(self) -> None:
        self._timer.stop()
        self._pending = self._EMPTY
