"""
Parcel Overlay - Web Mercator map surface that hosts the rectangle editor
"""

import logging
import math
from typing import Optional, Tuple

from PySide6.QtCore import Qt, QPointF, Signal
from PySide6.QtGui import QPainter, QPen, QBrush, QColor, QFont, QPolygonF
from PySide6.QtWidgets import QWidget

from ..calculations.area_calculator import format_area
from ..calculations.coordinate_converter import Position
from .rectangle_controller import DrawingState
from .renderer import (
    FILL_LAYER,
    HANDLE_LAYER,
    HANDLE_SOURCE,
    LINE_LAYER,
    RECTANGLE_SOURCE,
    ROTATION_HANDLE_LAYER,
    ROTATION_HANDLE_SOURCE,
    SAVED_FILL_LAYER,
    SAVED_LINE_LAYER,
    SAVED_PARCELS_SOURCE,
    feature_rings,
)

logger = logging.getLogger(__name__)

TILE_SIZE = 256
MIN_ZOOM = 1.0
MAX_ZOOM = 22.0
MAX_LATITUDE = 85.05112878


def _color(hex_color: str, opacity: float = 1.0) -> QColor:
    color = QColor(hex_color)
    color.setAlphaF(max(0.0, min(1.0, opacity)))
    return color


class ParcelOverlay(QWidget):
    """Map viewport standing in for the map host.

    Projects lng/lat with spherical Web Mercator around ``center`` at
    ``zoom``, paints the renderer's sources and forwards pointer input to
    the RectangleController. Panning and wheel zoom are the map gestures the
    controller suspends while a handle is dragged.
    """

    # Signals
    coordinates_clicked = Signal(float, float)  # lng, lat of a left click
    view_changed = Signal()                      # center or zoom changed

    def __init__(self, renderer, center: Position = Position(0.0, 0.0), zoom: float = 17.0, parent=None):
        super().__init__(parent)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(False)
        self.setMinimumSize(400, 300)

        self.renderer = renderer
        self.controller = None
        self.center = Position(*center)
        self.zoom = float(zoom)
        self.show_area_label = True

        self._gestures_enabled = True
        self._pan_last: Optional[QPointF] = None

        self.renderer.changed.connect(self.update)

    def set_controller(self, controller):
        self.controller = controller

    # ---------------------- Map host interface ----------------------
    @property
    def gestures_enabled(self) -> bool:
        return self._gestures_enabled

    def set_gestures_enabled(self, enabled: bool) -> None:
        self._gestures_enabled = bool(enabled)
        if not enabled:
            self._pan_last = None

    def _world_size(self) -> float:
        return TILE_SIZE * (2.0 ** self.zoom)

    def _project(self, position: Position) -> Tuple[float, float]:
        lng, lat = position[0], max(-MAX_LATITUDE, min(MAX_LATITUDE, position[1]))
        world = self._world_size()
        x = (lng + 180.0) / 360.0 * world
        lat_rad = math.radians(lat)
        y = (1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * world
        return x, y

    def _unproject(self, x: float, y: float) -> Position:
        world = self._world_size()
        lng = x / world * 360.0 - 180.0
        n = math.pi * (1.0 - 2.0 * y / world)
        lat = math.degrees(math.atan(math.sinh(n)))
        return Position(lng, lat)

    def pixel_for_coordinate(self, position: Position) -> Tuple[float, float]:
        cx, cy = self._project(self.center)
        x, y = self._project(position)
        return x - cx + self.width() / 2.0, y - cy + self.height() / 2.0

    def coordinate_for_pixel(self, x: float, y: float) -> Position:
        cx, cy = self._project(self.center)
        return self._unproject(cx + x - self.width() / 2.0, cy + y - self.height() / 2.0)

    def pan_by_pixels(self, dx: float, dy: float):
        """Move the map so content follows a drag of (dx, dy) pixels"""
        cx, cy = self._project(self.center)
        self.center = self._unproject(cx - dx, cy - dy)
        self.view_changed.emit()
        self.update()

    def set_zoom(self, zoom: float):
        self.zoom = max(MIN_ZOOM, min(MAX_ZOOM, float(zoom)))
        self.view_changed.emit()
        self.update()

    # ---------------------- Mouse/keyboard events ----------------------
    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            return
        point = event.position()
        position = self.coordinate_for_pixel(point.x(), point.y())
        self.coordinates_clicked.emit(position.lng, position.lat)

        if self.controller is not None:
            if self.controller.is_selected and self.controller.state is not DrawingState.PLACEMENT:
                handle = self.controller.hit_test(position)
                if handle is not None:
                    self.controller.start_drag(handle, position)
                    return
            if self.controller.handle_map_tap(position):
                self.update()
                return

        if self._gestures_enabled:
            self._pan_last = point

    def mouseMoveEvent(self, event):
        if not (event.buttons() & Qt.LeftButton):
            return
        point = event.position()
        if self.controller is not None and self.controller.is_dragging:
            self.controller.update_drag(self.coordinate_for_pixel(point.x(), point.y()))
            return
        if self._pan_last is not None and self._gestures_enabled:
            self.pan_by_pixels(point.x() - self._pan_last.x(), point.y() - self._pan_last.y())
            self._pan_last = point

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.LeftButton:
            return
        point = event.position()
        if self.controller is not None and self.controller.is_dragging:
            self.controller.update_drag(self.coordinate_for_pixel(point.x(), point.y()))
            self.controller.end_drag()
        self._pan_last = None
        self.update()

    def wheelEvent(self, event):
        if not self._gestures_enabled:
            return
        steps = event.angleDelta().y() / 120.0
        if steps:
            self.set_zoom(self.zoom + 0.5 * steps)

    def keyPressEvent(self, event):
        if self.controller is None:
            return super().keyPressEvent(event)
        key = event.key()
        if key == Qt.Key_P:
            self.controller.enter_placement_mode()
        elif key in (Qt.Key_Delete, Qt.Key_Backspace):
            self.controller.clear()
        elif key == Qt.Key_Escape:
            if self.controller.is_dragging:
                self.controller.cancel_drag()
            else:
                self.controller.set_selected(False)
        else:
            return super().keyPressEvent(event)
        self.update()

    # ---------------------- Painting ----------------------
    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        try:
            painter.fillRect(self.rect(), QColor(236, 239, 241))
            if not self.renderer.is_initialized:
                return
            self.draw_polygons(painter, SAVED_PARCELS_SOURCE, SAVED_FILL_LAYER, SAVED_LINE_LAYER)
            self.draw_polygons(painter, RECTANGLE_SOURCE, FILL_LAYER, LINE_LAYER)
            if self.renderer.handles_visible():
                self.draw_handles(painter, HANDLE_SOURCE, HANDLE_LAYER)
                self.draw_handles(painter, ROTATION_HANDLE_SOURCE, ROTATION_HANDLE_LAYER)
            if self.show_area_label:
                self.draw_area_label(painter)
        except Exception as e:
            logger.error("Error drawing overlay: %s", e)
        finally:
            painter.end()

    def _polygon(self, ring) -> QPolygonF:
        polygon = QPolygonF()
        for lng, lat in ring:
            x, y = self.pixel_for_coordinate(Position(lng, lat))
            polygon.append(QPointF(x, y))
        return polygon

    def draw_polygons(self, painter, source_id, fill_layer_id, line_layer_id):
        fill = self.renderer.layer(fill_layer_id)
        line = self.renderer.layer(line_layer_id)
        painter.setPen(QPen(_color(line.get('line-color', '#000000')), line.get('line-width', 1.0)))
        painter.setBrush(QBrush(_color(fill.get('fill-color', '#000000'), fill.get('fill-opacity', 0.3))))
        for ring in feature_rings(self.renderer.source(source_id)):
            painter.drawPolygon(self._polygon(ring))

    def draw_handles(self, painter, source_id, layer_id):
        style = self.renderer.layer(layer_id)
        opacity = style.get('circle-opacity', 1.0)
        radius = style.get('circle-radius', 6.0)
        painter.setPen(QPen(_color(style.get('circle-stroke-color', '#FFFFFF'), opacity),
                            style.get('circle-stroke-width', 1.5)))
        painter.setBrush(QBrush(_color(style.get('circle-color', '#FF0000'), opacity)))
        for feature in self.renderer.source(source_id).get('features', []):
            lng, lat = feature['geometry']['coordinates']
            x, y = self.pixel_for_coordinate(Position(lng, lat))
            painter.drawEllipse(QPointF(x, y), radius, radius)

    def draw_area_label(self, painter):
        features = self.renderer.source(RECTANGLE_SOURCE).get('features', [])
        if not features:
            return
        properties = features[0].get('properties', {})
        text = format_area(properties.get('area_acres', 0.0))
        painter.setPen(QPen(Qt.black))
        painter.setFont(QFont("Arial", 10, QFont.Bold))
        painter.drawText(12, 22, text)
