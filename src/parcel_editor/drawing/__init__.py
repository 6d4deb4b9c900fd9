"""
Drawing components - Hit testing, rendering and the interactive rectangle controller
"""

from .hit_test import HandleType, hit_test_handle, handle_positions
from .debounce import DebouncedUpdate
from .map_binding import MapHost, MapGestureService
from .renderer import ParcelRenderer, GeoJsonRenderer, RendererError
from .rectangle_controller import DrawingState, RectangleController
from .parcel_overlay import ParcelOverlay

__all__ = [
    'HandleType',
    'hit_test_handle',
    'handle_positions',
    'DebouncedUpdate',
    'MapHost',
    'MapGestureService',
    'ParcelRenderer',
    'GeoJsonRenderer',
    'RendererError',
    'DrawingState',
    'RectangleController',
    'ParcelOverlay'
]
