"""
Hit testing - Resolve which rectangle handle (if any) a pointer targets
"""

import logging
import math
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..calculations.coordinate_converter import Position, rotate_point_around_center, meters_to_latitude_degrees
from ..calculations.parcel_constants import HIT_TEST_RADIUS_PX, ROTATION_HANDLE_OFFSET_FRACTION
from ..models.rectangle import RectangleModel

logger = logging.getLogger(__name__)

# Host projection: geographic position -> screen pixel (x, y)
Projection = Callable[[Position], Tuple[float, float]]


class HandleType(Enum):
    """Draggable handles; the value is the handle index used by the renderer"""
    SIDE_TOP = 0
    SIDE_RIGHT = 1
    SIDE_BOTTOM = 2
    SIDE_LEFT = 3
    ROTATION = 4

    @property
    def is_side(self):
        return self is not HandleType.ROTATION


SIDE_HANDLES = (HandleType.SIDE_TOP, HandleType.SIDE_RIGHT, HandleType.SIDE_BOTTOM, HandleType.SIDE_LEFT)


def _midpoint(a: Position, b: Position) -> Position:
    return Position((a.lng + b.lng) / 2.0, (a.lat + b.lat) / 2.0)


def side_handle_positions(rectangle: RectangleModel) -> List[Position]:
    """Edge midpoints in handle order: top, right, bottom, left."""
    c = rectangle.corners
    return [
        _midpoint(c[2], c[3]),
        _midpoint(c[1], c[2]),
        _midpoint(c[0], c[1]),
        _midpoint(c[3], c[0]),
    ]


def rotation_handle_position(rectangle: RectangleModel) -> Position:
    """Point beyond the top edge midpoint, pushed outward along the rotated up-axis."""
    offset_north = rectangle.height_meters / 2.0 + rectangle.height_meters * ROTATION_HANDLE_OFFSET_FRACTION
    unrotated = Position(
        rectangle.center.lng,
        rectangle.center.lat + meters_to_latitude_degrees(offset_north),
    )
    if rectangle.rotation_degrees == 0.0:
        return unrotated
    return rotate_point_around_center(unrotated, rectangle.center, rectangle.rotation_degrees)


def handle_positions(rectangle: RectangleModel) -> Dict[HandleType, Position]:
    positions = dict(zip(SIDE_HANDLES, side_handle_positions(rectangle)))
    positions[HandleType.ROTATION] = rotation_handle_position(rectangle)
    return positions


def hit_test_handle(position: Position,
                    rectangle: Optional[RectangleModel],
                    project: Projection,
                    tolerance_px: float = HIT_TEST_RADIUS_PX) -> Optional[HandleType]:
    """Return the handle within ``tolerance_px`` screen pixels of ``position``.

    Side handles are checked first (top, right, bottom, left), then the
    rotation handle. No match returns None, which simply means no drag starts.
    """
    if rectangle is None:
        return None
    try:
        tap_x, tap_y = project(position)
        for handle, handle_pos in handle_positions(rectangle).items():
            hx, hy = project(handle_pos)
            if math.hypot(tap_x - hx, tap_y - hy) < tolerance_px:
                return handle
    except (RuntimeError, ValueError, ZeroDivisionError) as e:
        logger.warning("Hit test failed: %s", e)
    return None
