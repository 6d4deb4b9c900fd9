"""
Area calculator for parcel polygons

Provides polygon area calculations over geographic rings and helpers to
convert and format the result for display. Independent of the rectangle
model, so it can cross-check ``width * height`` against the drawn ring.
"""

import math
from typing import List, Sequence, Tuple

from .coordinate_converter import EARTH_RADIUS_METERS, Position
from .parcel_constants import SQUARE_METERS_TO_ACRES, SQUARE_FEET_PER_ACRE


def _to_web_mercator(lng: float, lat: float) -> Tuple[float, float]:
	"""Project lng/lat degrees to Web Mercator meters."""
	x = EARTH_RADIUS_METERS * math.radians(lng)
	y = EARTH_RADIUS_METERS * math.log(math.tan(math.radians(lat) / 2 + math.pi / 4))
	return x, y


def _polygon_area(points: List[Tuple[float, float]]) -> float:
	"""Compute the area using the shoelace formula.
	Returns absolute area.
	"""
	if len(points) < 3:
		return 0.0
	area2 = 0.0
	for i in range(len(points)):
		x1, y1 = points[i]
		x2, y2 = points[(i + 1) % len(points)]
		area2 += (x1 * y2) - (x2 * y1)
	return abs(area2) / 2.0


def calculate_area_in_square_meters(ring: Sequence[Position]) -> float:
	"""Area of any polygon ring in m² (Web Mercator approximation).

	Mercator stretches lengths by 1/cos(lat), so the projected area is scaled
	back by cos² of the mean latitude.
	"""
	if len(ring) < 3:
		return 0.0
	projected = [_to_web_mercator(p[0], p[1]) for p in ring]
	mean_lat = sum(p[1] for p in ring) / len(ring)
	scale = math.cos(math.radians(mean_lat)) ** 2
	return _polygon_area(projected) * scale


def square_meters_to_acres(square_meters: float) -> float:
	return square_meters * SQUARE_METERS_TO_ACRES


def format_area(acres: float) -> str:
	"""Human readable area: square feet for tiny parcels, acres otherwise."""
	if acres < 0.01:
		return f"{acres * SQUARE_FEET_PER_ACRE:.0f} sq ft"
	if acres < 1:
		return f"{acres:.3f} acres"
	return f"{acres:.2f} acres"


def to_geojson_polygon(ring: Sequence[Position]) -> dict:
	"""GeoJSON Polygon geometry for a ring, closing it if needed."""
	coords = [[float(p[0]), float(p[1])] for p in ring]
	if coords and coords[0] != coords[-1]:
		coords.append(list(coords[0]))
	return {
		'type': 'Polygon',
		'coordinates': [coords],
	}
