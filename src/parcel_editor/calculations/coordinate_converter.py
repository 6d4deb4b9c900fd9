"""
Coordinate Converter - Meter/degree conversions and rotations for parcel geometry

All helpers use a local small-area approximation: one degree of latitude is
treated as a constant 111,320 m and longitude degrees shrink with cos(lat).
This is accurate at parcel scale and not intended for global distances near
the poles.
"""

import math
from typing import NamedTuple


EARTH_RADIUS_METERS = 6378137.0
METERS_PER_DEGREE_LATITUDE = 111320.0


class Position(NamedTuple):
    """Geographic point in degrees, GeoJSON axis order."""
    lng: float
    lat: float

    def to_list(self):
        return [self.lng, self.lat]

    def to_dict(self):
        return {'lng': self.lng, 'lat': self.lat}


def meters_to_latitude_degrees(meters: float) -> float:
    """Convert meters to degrees of latitude (constant everywhere)."""
    return meters / METERS_PER_DEGREE_LATITUDE


def meters_to_longitude_degrees(meters: float, latitude: float) -> float:
    """Convert meters to degrees of longitude at the given latitude."""
    lat_rad = math.radians(latitude)
    return meters / (METERS_PER_DEGREE_LATITUDE * math.cos(lat_rad))


def latitude_degrees_to_meters(degrees: float) -> float:
    return degrees * METERS_PER_DEGREE_LATITUDE


def longitude_degrees_to_meters(degrees: float, latitude: float) -> float:
    lat_rad = math.radians(latitude)
    return degrees * METERS_PER_DEGREE_LATITUDE * math.cos(lat_rad)


def distance_in_meters(p1: Position, p2: Position) -> float:
    """Great-circle distance between two positions (haversine)."""
    lat1_rad = math.radians(p1.lat)
    lat2_rad = math.radians(p2.lat)
    delta_lat = math.radians(p2.lat - p1.lat)
    delta_lng = math.radians(p2.lng - p1.lng)

    a = (math.sin(delta_lat / 2) ** 2
         + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def add_meters_to_position(position: Position, meters_north: float, meters_east: float) -> Position:
    """Move a position north/east by a number of meters."""
    lat_delta = meters_to_latitude_degrees(meters_north)
    lng_delta = meters_to_longitude_degrees(meters_east, position.lat)
    return Position(position.lng + lng_delta, position.lat + lat_delta)


def rotate_point_around_center(point: Position, center: Position, angle_degrees: float) -> Position:
    """Rotate ``point`` counter-clockwise around ``center``.

    The offset is flattened into meters around the center latitude, rotated
    with the standard 2D rotation matrix and converted back to degrees.
    """
    angle_rad = math.radians(angle_degrees)

    dx_meters = longitude_degrees_to_meters(point.lng - center.lng, center.lat)
    dy_meters = latitude_degrees_to_meters(point.lat - center.lat)

    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)
    rotated_x = dx_meters * cos_a - dy_meters * sin_a
    rotated_y = dx_meters * sin_a + dy_meters * cos_a

    return Position(
        center.lng + meters_to_longitude_degrees(rotated_x, center.lat),
        center.lat + meters_to_latitude_degrees(rotated_y),
    )


def normalize_degrees(angle_degrees: float) -> float:
    """Wrap any angle into [0, 360)."""
    normalized = math.fmod(angle_degrees, 360.0)
    if normalized < 0:
        normalized += 360.0
    # fmod of tiny negative values can round back up to exactly 360.0
    if normalized >= 360.0:
        normalized = 0.0
    return normalized


def bearing_degrees(center: Position, point: Position) -> float:
    """Angle of the vector center->point in degree space, normalized to [0, 360).

    Measured counter-clockwise from east. A zero-length vector yields 0.
    """
    dx = point.lng - center.lng
    dy = point.lat - center.lat
    if dx == 0 and dy == 0:
        return 0.0
    return normalize_degrees(math.degrees(math.atan2(dy, dx)))
