#!/usr/bin/env python3
"""
Tests for the map overlay: projection, gestures and pointer routing
"""

import math

import pytest
from PySide6.QtCore import QPoint, Qt
from PySide6.QtTest import QTest

from parcel_editor.calculations.coordinate_converter import Position, add_meters_to_position
from parcel_editor.drawing import (
    DrawingState,
    GeoJsonRenderer,
    MapGestureService,
    ParcelOverlay,
    RectangleController,
)
from parcel_editor.drawing.hit_test import side_handle_positions

CENTER = Position(0.0, 0.0)


@pytest.fixture
def overlay(qapp):
    overlay = ParcelOverlay(GeoJsonRenderer(), CENTER, zoom=18.0)
    overlay.resize(800, 600)
    overlay.show()
    yield overlay
    overlay.close()


@pytest.fixture
def controller(overlay):
    controller = RectangleController(overlay.renderer, MapGestureService(overlay),
                                     debounce_ms=1000, hit_tolerance_px=15.0)
    overlay.set_controller(controller)
    yield controller
    controller.dispose()


def to_point(overlay, position):
    x, y = overlay.pixel_for_coordinate(position)
    return QPoint(round(x), round(y))


def test_center_projects_to_widget_center(overlay):
    assert overlay.pixel_for_coordinate(CENTER) == pytest.approx((400.0, 300.0))


def test_projection_round_trip(overlay):
    position = Position(0.0004, -0.0003)
    x, y = overlay.pixel_for_coordinate(position)
    back = overlay.coordinate_for_pixel(x, y)
    assert back.lng == pytest.approx(position.lng, abs=1e-12)
    assert back.lat == pytest.approx(position.lat, abs=1e-12)


def test_north_is_up_and_east_is_right(overlay):
    east_x, _ = overlay.pixel_for_coordinate(add_meters_to_position(CENTER, 0.0, 10.0))
    _, north_y = overlay.pixel_for_coordinate(add_meters_to_position(CENTER, 10.0, 0.0))
    assert east_x > 400.0
    assert north_y < 300.0


def test_pan_and_zoom(overlay):
    overlay.pan_by_pixels(100.0, 0.0)
    assert overlay.center.lng < 0.0
    overlay.set_zoom(40.0)
    assert overlay.zoom == 22.0
    overlay.set_zoom(0.0)
    assert overlay.zoom == 1.0


def test_gesture_service_toggles_overlay(overlay):
    service = MapGestureService(overlay)
    service.suspend_gestures()
    assert not overlay.gestures_enabled
    service.unbind()
    assert overlay.gestures_enabled


def test_keyboard_placement_and_click(overlay, controller):
    QTest.keyClick(overlay, Qt.Key_P)
    assert controller.state is DrawingState.PLACEMENT

    QTest.mouseClick(overlay, Qt.LeftButton, Qt.NoModifier, QPoint(400, 300))
    assert controller.state is DrawingState.SELECTED
    assert controller.rectangle.center.lng == pytest.approx(0.0, abs=1e-5)
    assert controller.rectangle.area == pytest.approx(400.0)

    QTest.keyClick(overlay, Qt.Key_Escape)
    assert not controller.is_selected

    QTest.keyClick(overlay, Qt.Key_Delete)
    assert controller.rectangle is None
    assert controller.state is DrawingState.IDLE


def test_press_on_handle_drags_and_release_commits(overlay, controller):
    rect = controller.load_from_persisted({
        'center': CENTER.to_dict(), 'widthMeters': 50.0, 'heightMeters': 100.0,
    })
    controller.set_selected(True)
    right = side_handle_positions(rect)[1]

    QTest.mousePress(overlay, Qt.LeftButton, Qt.NoModifier, to_point(overlay, right))
    assert controller.is_dragging
    assert not overlay.gestures_enabled

    release_at = add_meters_to_position(CENTER, 0.0, 2.0 * math.hypot(25.0, 50.0))
    QTest.mouseRelease(overlay, Qt.LeftButton, Qt.NoModifier, to_point(overlay, release_at))
    assert not controller.is_dragging
    assert overlay.gestures_enabled
    assert controller.rectangle.area == pytest.approx(20000.0, rel=2e-2)


def test_paint_with_rectangle_and_handles(overlay, controller):
    controller.create_at(CENTER)
    overlay.renderer.update_saved([controller.rectangle.copy_with(width_meters=80.0)])
    pixmap = overlay.grab()
    assert not pixmap.isNull()
