"""
Calculations package - Geographic conversion and area math for parcels
"""

from .coordinate_converter import (
    Position,
    EARTH_RADIUS_METERS,
    METERS_PER_DEGREE_LATITUDE,
    meters_to_latitude_degrees,
    meters_to_longitude_degrees,
    latitude_degrees_to_meters,
    longitude_degrees_to_meters,
    distance_in_meters,
    add_meters_to_position,
    rotate_point_around_center,
    bearing_degrees,
    normalize_degrees,
)
from .area_calculator import (
    calculate_area_in_square_meters,
    square_meters_to_acres,
    format_area,
    to_geojson_polygon,
)

__all__ = [
    'Position',
    'EARTH_RADIUS_METERS',
    'METERS_PER_DEGREE_LATITUDE',
    'meters_to_latitude_degrees',
    'meters_to_longitude_degrees',
    'latitude_degrees_to_meters',
    'longitude_degrees_to_meters',
    'distance_in_meters',
    'add_meters_to_position',
    'rotate_point_around_center',
    'bearing_degrees',
    'normalize_degrees',
    'calculate_area_in_square_meters',
    'square_meters_to_acres',
    'format_area',
    'to_geojson_polygon',
]
