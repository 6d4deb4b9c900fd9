#!/usr/bin/env python3
"""
Tests for meter/degree conversion, rotation and area helpers
"""

import math

import pytest

from parcel_editor.calculations import (
    Position,
    add_meters_to_position,
    bearing_degrees,
    calculate_area_in_square_meters,
    distance_in_meters,
    format_area,
    latitude_degrees_to_meters,
    longitude_degrees_to_meters,
    meters_to_latitude_degrees,
    meters_to_longitude_degrees,
    normalize_degrees,
    rotate_point_around_center,
    square_meters_to_acres,
    to_geojson_polygon,
)


def test_latitude_degree_is_constant_length():
    assert meters_to_latitude_degrees(111320.0) == pytest.approx(1.0)
    assert latitude_degrees_to_meters(0.5) == pytest.approx(55660.0)


def test_longitude_degrees_widen_with_latitude():
    assert meters_to_longitude_degrees(111320.0, 0.0) == pytest.approx(1.0)
    assert meters_to_longitude_degrees(111320.0, 60.0) == pytest.approx(2.0)
    assert longitude_degrees_to_meters(2.0, 60.0) == pytest.approx(111320.0)


def test_haversine_distance_one_degree_latitude():
    expected = 6378137.0 * math.pi / 180.0
    assert distance_in_meters(Position(0.0, 0.0), Position(0.0, 1.0)) == pytest.approx(expected)
    assert distance_in_meters(Position(5.0, 5.0), Position(5.0, 5.0)) == 0.0


def test_add_meters_to_position_matches_distance():
    start = Position(-97.7431, 30.2672)
    moved = add_meters_to_position(start, 30.0, 40.0)
    assert distance_in_meters(start, moved) == pytest.approx(50.0, rel=1e-3)


def test_rotate_quarter_turn_counter_clockwise():
    center = Position(10.0, 45.0)
    east = add_meters_to_position(center, 0.0, 100.0)
    rotated = rotate_point_around_center(east, center, 90.0)
    assert rotated.lng == pytest.approx(center.lng, abs=1e-9)
    assert latitude_degrees_to_meters(rotated.lat - center.lat) == pytest.approx(100.0)


def test_rotate_full_turn_is_identity():
    center = Position(0.0, 0.0)
    point = Position(0.001, 0.002)
    rotated = rotate_point_around_center(point, center, 360.0)
    assert rotated.lng == pytest.approx(point.lng)
    assert rotated.lat == pytest.approx(point.lat)


@pytest.mark.parametrize("angle,expected", [
    (0.0, 0.0),
    (360.0, 0.0),
    (-90.0, 270.0),
    (725.0, 5.0),
    (-720.0, 0.0),
])
def test_normalize_degrees(angle, expected):
    assert normalize_degrees(angle) == pytest.approx(expected)


def test_normalize_tiny_negative_stays_in_range():
    assert 0.0 <= normalize_degrees(-1e-15) < 360.0


def test_bearing_degrees():
    center = Position(0.0, 0.0)
    assert bearing_degrees(center, Position(1.0, 0.0)) == pytest.approx(0.0)
    assert bearing_degrees(center, Position(0.0, 1.0)) == pytest.approx(90.0)
    assert bearing_degrees(center, Position(-1.0, 1.0)) == pytest.approx(135.0)
    assert bearing_degrees(center, Position(0.0, -1.0)) == pytest.approx(270.0)
    assert bearing_degrees(center, center) == 0.0


def test_mercator_area_close_to_width_times_height():
    center = Position(0.0, 0.0)
    sw = add_meters_to_position(center, -50.0, -25.0)
    ne = add_meters_to_position(center, 50.0, 25.0)
    ring = [sw, Position(ne.lng, sw.lat), ne, Position(sw.lng, ne.lat), sw]
    assert calculate_area_in_square_meters(ring) == pytest.approx(5000.0, rel=1e-3)
    assert calculate_area_in_square_meters(ring[:2]) == 0.0


def test_square_meters_to_acres():
    assert square_meters_to_acres(4046.86) == pytest.approx(1.0, rel=1e-4)


def test_format_area_switches_units():
    assert format_area(0.005) == "218 sq ft"
    assert format_area(0.0989) == "0.099 acres"
    assert format_area(2.5) == "2.50 acres"


def test_geojson_polygon_closes_ring():
    polygon = to_geojson_polygon([Position(0, 0), Position(1, 0), Position(1, 1)])
    assert polygon['type'] == 'Polygon'
    ring = polygon['coordinates'][0]
    assert len(ring) == 4
    assert ring[0] == ring[-1]
