"""
Parcel Renderer - GeoJSON sources and layer styles consumed by the map overlay
"""

import copy
import logging
from typing import Dict, List, Optional, Protocol, Sequence

from PySide6.QtCore import QObject, Signal

from ..calculations.parcel_constants import (
    HANDLE_STROKE_COLOR,
    PRIMARY_COLOR,
    ROTATION_HANDLE_COLOR,
    SAVED_PARCEL_COLOR,
    SELECTED_FILL_COLOR,
    SELECTED_LINE_COLOR,
    SIDE_HANDLE_COLOR,
)
from ..models.rectangle import RectangleModel
from .hit_test import rotation_handle_position, side_handle_positions

logger = logging.getLogger(__name__)

RECTANGLE_SOURCE = 'rectangle-geojson-source'
HANDLE_SOURCE = 'rectangle-handle-source'
ROTATION_HANDLE_SOURCE = 'rectangle-rotation-handle-source'
SAVED_PARCELS_SOURCE = 'saved-parcels-source'

FILL_LAYER = 'rectangle-fill-layer'
LINE_LAYER = 'rectangle-line-layer'
HANDLE_LAYER = 'rectangle-handle-layer'
ROTATION_HANDLE_LAYER = 'rectangle-rotation-handle-layer'
SAVED_FILL_LAYER = 'saved-parcels-fill-layer'
SAVED_LINE_LAYER = 'saved-parcels-line-layer'


class RendererError(Exception):
    """Raised by a renderer that failed to draw"""


class ParcelRenderer(Protocol):
    """Drawing surface the controller pushes rectangle snapshots to.

    Every call is idempotent and accepts None to clear.
    """

    def update(self, rectangle: Optional[RectangleModel]) -> None: ...

    def update_handles(self, rectangle: Optional[RectangleModel], visible: bool) -> None: ...

    def set_selected(self, selected: bool) -> None: ...

    def update_saved(self, rectangles: Sequence[RectangleModel]) -> None: ...

    def dispose(self) -> None: ...


def _empty_collection() -> Dict:
    return {'type': 'FeatureCollection', 'features': []}


def _point_feature(position, properties: Dict) -> Dict:
    return {
        'type': 'Feature',
        'geometry': {'type': 'Point', 'coordinates': [position.lng, position.lat]},
        'properties': properties,
    }


def _default_layers() -> Dict[str, Dict]:
    return {
        FILL_LAYER: {'source': RECTANGLE_SOURCE, 'fill-color': PRIMARY_COLOR, 'fill-opacity': 0.30},
        LINE_LAYER: {'source': RECTANGLE_SOURCE, 'line-color': PRIMARY_COLOR, 'line-width': 2.0},
        HANDLE_LAYER: {
            'source': HANDLE_SOURCE, 'circle-color': SIDE_HANDLE_COLOR, 'circle-radius': 6.0,
            'circle-stroke-color': HANDLE_STROKE_COLOR, 'circle-stroke-width': 1.5, 'circle-opacity': 0.0,
        },
        ROTATION_HANDLE_LAYER: {
            'source': ROTATION_HANDLE_SOURCE, 'circle-color': ROTATION_HANDLE_COLOR, 'circle-radius': 6.0,
            'circle-stroke-color': HANDLE_STROKE_COLOR, 'circle-stroke-width': 1.5, 'circle-opacity': 0.0,
        },
        SAVED_FILL_LAYER: {'source': SAVED_PARCELS_SOURCE, 'fill-color': SAVED_PARCEL_COLOR, 'fill-opacity': 0.20},
        SAVED_LINE_LAYER: {'source': SAVED_PARCELS_SOURCE, 'line-color': SAVED_PARCEL_COLOR, 'line-width': 2.0},
    }


class GeoJsonRenderer(QObject):
    """Keeps one FeatureCollection per source plus a layer style table.

    Paint surfaces read ``source()`` / ``layer()`` and repaint on ``changed``.
    """

    changed = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._sources: Dict[str, Dict] = {}
        self._layers: Dict[str, Dict] = {}
        self._initialized = False
        self.initialize()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Create sources and layers once."""
        if self._initialized:
            return
        for source_id in (RECTANGLE_SOURCE, HANDLE_SOURCE, ROTATION_HANDLE_SOURCE, SAVED_PARCELS_SOURCE):
            self._sources.setdefault(source_id, _empty_collection())
        for layer_id, style in _default_layers().items():
            self._layers.setdefault(layer_id, style)
        self._initialized = True
        logger.debug("GeoJsonRenderer initialized")

    # ---------------------- Accessors ----------------------
    def source(self, source_id: str) -> Dict:
        return copy.deepcopy(self._sources.get(source_id, _empty_collection()))

    def layer(self, layer_id: str) -> Dict:
        return dict(self._layers.get(layer_id, {}))

    def handles_visible(self) -> bool:
        return self._layers.get(HANDLE_LAYER, {}).get('circle-opacity', 0.0) > 0.0

    # ---------------------- Renderer contract ----------------------
    def update(self, rectangle: Optional[RectangleModel]) -> None:
        if not self._initialized:
            return
        if rectangle is None:
            self._sources[RECTANGLE_SOURCE] = _empty_collection()
        else:
            self._sources[RECTANGLE_SOURCE] = {
                'type': 'FeatureCollection',
                'features': [rectangle.to_geojson_feature()],
            }
        self.changed.emit()

    def update_handles(self, rectangle: Optional[RectangleModel], visible: bool) -> None:
        """Draw or hide the four side handles and the rotation handle."""
        if not self._initialized:
            return
        if rectangle is None or not visible:
            self._sources[HANDLE_SOURCE] = _empty_collection()
            self._sources[ROTATION_HANDLE_SOURCE] = _empty_collection()
            self._set_handle_opacity(0.0)
            self.changed.emit()
            return

        side_features = [
            _point_feature(pos, {'handleIndex': index})
            for index, pos in enumerate(side_handle_positions(rectangle))
        ]
        self._sources[HANDLE_SOURCE] = {'type': 'FeatureCollection', 'features': side_features}
        self._sources[ROTATION_HANDLE_SOURCE] = {
            'type': 'FeatureCollection',
            'features': [_point_feature(rotation_handle_position(rectangle), {'type': 'rotation'})],
        }
        self._set_handle_opacity(1.0)
        self.changed.emit()

    def set_selected(self, selected: bool) -> None:
        if not self._initialized:
            return
        fill = self._layers[FILL_LAYER]
        line = self._layers[LINE_LAYER]
        fill['fill-color'] = SELECTED_FILL_COLOR if selected else PRIMARY_COLOR
        fill['fill-opacity'] = 0.45 if selected else 0.30
        line['line-color'] = SELECTED_LINE_COLOR if selected else PRIMARY_COLOR
        line['line-width'] = 3.0 if selected else 2.0
        self.changed.emit()

    def update_saved(self, rectangles: Sequence[RectangleModel]) -> None:
        if not self._initialized:
            return
        self._sources[SAVED_PARCELS_SOURCE] = {
            'type': 'FeatureCollection',
            'features': [r.to_geojson_feature() for r in rectangles],
        }
        self.changed.emit()

    def dispose(self) -> None:
        self._sources.clear()
        self._layers.clear()
        self._initialized = False
        self.changed.emit()

    def _set_handle_opacity(self, opacity: float) -> None:
        self._layers[HANDLE_LAYER]['circle-opacity'] = opacity
        self._layers[ROTATION_HANDLE_LAYER]['circle-opacity'] = opacity


def feature_rings(collection: Dict) -> List[List[List[float]]]:
    """Outer rings of every polygon feature in a collection."""
    rings = []
    for feature in collection.get('features', []):
        geometry = feature.get('geometry') or {}
        if geometry.get('type') == 'Polygon' and geometry.get('coordinates'):
            rings.append(geometry['coordinates'][0])
    return rings
