"""
Rectangle Model - Center-based parcel rectangle with rotation and area tracking
"""

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..calculations.area_calculator import square_meters_to_acres, to_geojson_polygon
from ..calculations.coordinate_converter import (
	Position,
	distance_in_meters,
	meters_to_latitude_degrees,
	meters_to_longitude_degrees,
	normalize_degrees,
	rotate_point_around_center,
)
from ..calculations.parcel_constants import (
	DEFAULT_HEIGHT_METERS,
	DEFAULT_WIDTH_METERS,
	MINIMUM_AREA_METERS_SQUARED,
)

logger = logging.getLogger(__name__)


def _new_local_id() -> str:
	return str(time.time_ns() // 1000)


def _parse_timestamp(value) -> Optional[datetime]:
	if value is None:
		return None
	if isinstance(value, datetime):
		return value
	return datetime.fromisoformat(str(value).replace('Z', '+00:00'))


@dataclass(frozen=True)
class AreaIncreaseEvent:
	"""A single recorded growth of the parcel area"""
	timestamp: datetime
	delta_meters_squared: float
	previous_area: float
	new_area: float

	def __post_init__(self):
		if not self.new_area > self.previous_area:
			raise ValueError(
				f"Area increase event requires growth: {self.previous_area} -> {self.new_area}"
			)

	@classmethod
	def between(cls, previous_area: float, new_area: float, timestamp: Optional[datetime] = None):
		return cls(
			timestamp=timestamp or datetime.now(),
			delta_meters_squared=new_area - previous_area,
			previous_area=previous_area,
			new_area=new_area,
		)

	def to_json(self) -> Dict[str, Any]:
		return {
			'timestamp': self.timestamp.isoformat(),
			'deltaMetersSquared': self.delta_meters_squared,
			'previousArea': self.previous_area,
			'newArea': self.new_area,
		}

	@classmethod
	def from_json(cls, data: Dict[str, Any]):
		return cls(
			timestamp=_parse_timestamp(data['timestamp']),
			delta_meters_squared=float(data['deltaMetersSquared']),
			previous_area=float(data['previousArea']),
			new_area=float(data['newArea']),
		)


@dataclass(frozen=True)
class RectangleModel:
	"""Rectangle defined by its center, size in meters and rotation.

	Instances are immutable; every edit produces a new value via
	``copy_with``. Corners and area are derived on demand.
	"""
	center: Position
	width_meters: float
	height_meters: float
	rotation_degrees: float = 0.0
	id: str = field(default_factory=_new_local_id)
	persisted_id: Optional[str] = None
	name: Optional[str] = None
	created_at: datetime = field(default_factory=datetime.now)
	area_increase_history: Tuple[AreaIncreaseEvent, ...] = ()

	def __post_init__(self):
		if not self.width_meters > 0:
			raise ValueError(f"Width must be positive, got {self.width_meters}")
		if not self.height_meters > 0:
			raise ValueError(f"Height must be positive, got {self.height_meters}")
		if not 0.0 <= self.rotation_degrees < 360.0:
			raise ValueError(f"Rotation must be in [0, 360), got {self.rotation_degrees}")
		if not isinstance(self.center, Position):
			object.__setattr__(self, 'center', Position(float(self.center[0]), float(self.center[1])))
		if not isinstance(self.area_increase_history, tuple):
			object.__setattr__(self, 'area_increase_history', tuple(self.area_increase_history))

	# ---------------------- Factories ----------------------
	@classmethod
	def from_center(cls, center, width_meters: float, height_meters: float,
					rotation_degrees: float = 0.0, **kwargs):
		"""Create a rectangle, wrapping any rotation into [0, 360)."""
		return cls(
			center=Position(float(center[0]), float(center[1])),
			width_meters=float(width_meters),
			height_meters=float(height_meters),
			rotation_degrees=normalize_degrees(float(rotation_degrees)),
			**kwargs,
		)

	@classmethod
	def default_at(cls, center, id: Optional[str] = None):
		"""Default 20x20 m, unrotated rectangle placed at ``center``."""
		kwargs = {'id': id} if id is not None else {}
		return cls.from_center(center, DEFAULT_WIDTH_METERS, DEFAULT_HEIGHT_METERS, 0.0, **kwargs)

	@classmethod
	def from_persisted(cls, data: Dict[str, Any]):
		"""Rebuild a rectangle from a stored record.

		Canonical records carry center/width/height and are restored exactly.
		Legacy records only carry the polygon; the center becomes the corner
		centroid, width/height come from the first two edges and rotation is
		lost (reset to 0).
		"""
		raw_id = data.get('id', data.get('_id'))
		persisted_id = str(raw_id) if raw_id is not None else None
		common = {
			'persisted_id': persisted_id,
			'name': data.get('name'),
			'created_at': cls._persisted_created_at(data.get('createdAt'), persisted_id),
			'area_increase_history': cls._persisted_history(data.get('areaIncreaseHistory'), persisted_id),
		}
		if persisted_id is not None:
			common['id'] = persisted_id

		center_data = data.get('center')
		if (isinstance(center_data, dict) and center_data.get('lng') is not None
				and center_data.get('lat') is not None
				and data.get('widthMeters') is not None and data.get('heightMeters') is not None):
			return cls.from_center(
				Position(float(center_data['lng']), float(center_data['lat'])),
				float(data['widthMeters']),
				float(data['heightMeters']),
				float(data.get('rotationDegrees') or 0.0),
				**common,
			)

		corners = cls._legacy_corners(data)
		centroid = Position(
			sum(c.lng for c in corners[:4]) / 4.0,
			sum(c.lat for c in corners[:4]) / 4.0,
		)
		width = distance_in_meters(corners[0], corners[1])
		height = distance_in_meters(corners[1], corners[2])
		logger.info("Rebuilt legacy parcel %s from corners; rotation reset to 0", persisted_id)
		return cls.from_center(centroid, width, height, 0.0, **common)

	@staticmethod
	def _persisted_created_at(value, persisted_id: Optional[str]) -> datetime:
		try:
			return _parse_timestamp(value) or datetime.now()
		except (TypeError, ValueError):
			logger.warning("Parcel %s has unparseable createdAt %r, using now", persisted_id, value)
			return datetime.now()

	@staticmethod
	def _persisted_history(entries, persisted_id: Optional[str]) -> Tuple[AreaIncreaseEvent, ...]:
		"""Readable history events; malformed entries are skipped."""
		if not isinstance(entries, (list, tuple)):
			if entries:
				logger.warning("Parcel %s has non-list areaIncreaseHistory, ignoring it", persisted_id)
			return ()
		history = []
		for entry in entries:
			try:
				history.append(AreaIncreaseEvent.from_json(entry))
			except (KeyError, TypeError, ValueError) as e:
				logger.warning("Skipping bad history entry of parcel %s: %r (%s)", persisted_id, entry, e)
		return tuple(history)

	@staticmethod
	def _legacy_corners(data: Dict[str, Any]) -> List[Position]:
		geometry = data.get('geometry') or {}
		if isinstance(geometry, dict) and geometry.get('type') == 'Feature':
			geometry = geometry.get('geometry') or {}
		if not isinstance(geometry, dict):
			raise ValueError(f"Record geometry is not a GeoJSON object: {geometry!r}")
		try:
			ring = geometry['coordinates'][0]
			corners = [Position(float(c[0]), float(c[1])) for c in ring]
		except (KeyError, IndexError, TypeError, ValueError) as e:
			raise ValueError(f"Record has neither rectangle fields nor polygon geometry: {e}") from e
		if len(corners) < 4:
			raise ValueError(f"Legacy polygon needs 4 corners, got {len(corners)}")
		return corners

	# ---------------------- Copies ----------------------
	def copy_with(self, **changes):
		if 'rotation_degrees' in changes:
			changes['rotation_degrees'] = normalize_degrees(changes['rotation_degrees'])
		return replace(self, **changes)

	def record_area_increase(self, event: AreaIncreaseEvent):
		return replace(self, area_increase_history=self.area_increase_history + (event,))

	# ---------------------- Geometry ----------------------
	def compute_corners(self) -> List[Position]:
		"""Bottom-left, bottom-right, top-right, top-left."""
		half_w = self.width_meters / 2.0
		half_h = self.height_meters / 2.0
		local = [
			(-half_w, -half_h),
			(half_w, -half_h),
			(half_w, half_h),
			(-half_w, half_h),
		]
		corners = []
		for east, north in local:
			unrotated = Position(
				self.center.lng + meters_to_longitude_degrees(east, self.center.lat),
				self.center.lat + meters_to_latitude_degrees(north),
			)
			if self.rotation_degrees != 0.0:
				unrotated = rotate_point_around_center(unrotated, self.center, self.rotation_degrees)
			corners.append(unrotated)
		return corners

	@property
	def corners(self) -> List[Position]:
		return self.compute_corners()

	@property
	def coordinates(self) -> List[Position]:
		"""Closed ring: 4 corners plus the first corner again."""
		corners = self.compute_corners()
		return corners + [corners[0]]

	@property
	def area(self) -> float:
		return self.width_meters * self.height_meters

	@property
	def area_in_acres(self) -> float:
		return square_meters_to_acres(self.area)

	@property
	def is_valid_area(self) -> bool:
		return self.area >= MINIMUM_AREA_METERS_SQUARED

	def contains_point(self, lng: float, lat: float) -> bool:
		"""Even-odd ray casting against the closed corner ring."""
		pts = self.coordinates
		inside = False
		j = len(pts) - 1
		for i in range(len(pts)):
			xi, yi = pts[i]
			xj, yj = pts[j]
			if (yi > lat) != (yj > lat):
				x_cross = (xj - xi) * (lat - yi) / (yj - yi) + xi
				if lng < x_cross:
					inside = not inside
			j = i
		return inside

	# ---------------------- Serialization ----------------------
	def to_geojson_feature(self) -> Dict[str, Any]:
		return {
			'type': 'Feature',
			'geometry': to_geojson_polygon(self.coordinates),
			'properties': {
				'id': self.id,
				'area_acres': self.area_in_acres,
				'area_meters_squared': self.area,
			},
		}

	def to_persistence(self) -> Dict[str, Any]:
		"""Canonical storage record."""
		data = {
			'center': self.center.to_dict(),
			'widthMeters': self.width_meters,
			'heightMeters': self.height_meters,
			'rotationDegrees': self.rotation_degrees,
			'geometry': to_geojson_polygon(self.coordinates),
			'areaInAcres': self.area_in_acres,
			'areaInMetersSquared': self.area,
			'areaIncreaseHistory': [e.to_json() for e in self.area_increase_history],
			'createdAt': self.created_at.isoformat(),
		}
		if self.persisted_id is not None:
			data['id'] = self.persisted_id
		if self.name:
			data['name'] = self.name
		return data

	def __repr__(self):
		return (f"<RectangleModel(id='{self.id}', center=({self.center.lng:.6f}, {self.center.lat:.6f}), "
				f"{self.width_meters:.1f}x{self.height_meters:.1f} m, rot={self.rotation_degrees:.1f})>")
