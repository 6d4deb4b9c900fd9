"""
Parcel Records - Stored parcel rectangles and the manager that saves/loads them
"""

import logging
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Float, JSON
from sqlalchemy.exc import SQLAlchemyError

from .database import Base

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
	"""Raised when a parcel could not be saved, loaded or deleted"""


def _parse_created_at(value):
	if not value:
		return datetime.now()
	if isinstance(value, datetime):
		return value
	try:
		return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
	except ValueError:
		logger.warning("Unparseable createdAt %r, using now", value)
		return datetime.now()


class ParcelRecord(Base):
	"""Persisted parcel rectangle in canonical form.

	Legacy rows only carry ``geometry``; their center/size columns are NULL.
	"""
	__tablename__ = 'parcel_records'

	id = Column(Integer, primary_key=True)
	name = Column(String(255))

	# Canonical rectangle fields
	center_lng = Column(Float)
	center_lat = Column(Float)
	width_meters = Column(Float)
	height_meters = Column(Float)
	rotation_degrees = Column(Float, default=0.0)

	# Derived values kept for querying/reporting
	area_in_meters_squared = Column(Float)
	area_in_acres = Column(Float)

	geometry = Column(JSON)  # GeoJSON Polygon
	area_increase_history = Column(JSON)  # list of event dicts

	created_at = Column(DateTime, default=datetime.now)
	modified_date = Column(DateTime, default=datetime.now, onupdate=datetime.now)

	def __repr__(self):
		return f"<ParcelRecord(id={self.id}, area={self.area_in_meters_squared}, legacy={self.is_legacy})>"

	@property
	def is_legacy(self):
		return self.center_lng is None or self.width_meters is None

	def to_dict(self):
		"""Convert to the record format understood by RectangleModel.from_persisted"""
		data = {
			'id': str(self.id),
			'geometry': self.geometry,
			'areaIncreaseHistory': list(self.area_increase_history or []),
			'createdAt': self.created_at.isoformat() if self.created_at else None,
		}
		if self.name:
			data['name'] = self.name
		if not self.is_legacy:
			data.update({
				'center': {'lng': self.center_lng, 'lat': self.center_lat},
				'widthMeters': self.width_meters,
				'heightMeters': self.height_meters,
				'rotationDegrees': self.rotation_degrees or 0.0,
				'areaInAcres': self.area_in_acres,
				'areaInMetersSquared': self.area_in_meters_squared,
			})
		return data

	def apply_record_data(self, data):
		"""Copy a canonical (or legacy) record onto this row"""
		center = data.get('center') or {}
		self.name = data.get('name', self.name)
		self.center_lng = center.get('lng')
		self.center_lat = center.get('lat')
		self.width_meters = data.get('widthMeters')
		self.height_meters = data.get('heightMeters')
		self.rotation_degrees = data.get('rotationDegrees') or 0.0
		self.area_in_meters_squared = data.get('areaInMetersSquared')
		self.area_in_acres = data.get('areaInAcres')
		self.geometry = data.get('geometry')
		self.area_increase_history = list(data.get('areaIncreaseHistory') or [])
		self.created_at = _parse_created_at(data.get('createdAt'))

	@classmethod
	def from_record_data(cls, data):
		record = cls()
		record.apply_record_data(data)
		return record


class ParcelRecordManager:
	"""Manager class for saving/loading parcel records"""

	def __init__(self, session_factory):
		self.get_session = session_factory

	def save(self, record_data):
		"""Insert a parcel, or update it when ``record_data['id']`` exists.

		Returns:
			str: identifier of the stored record
		"""
		session = self.get_session()
		try:
			record = None
			existing_id = record_data.get('id')
			if existing_id is not None:
				try:
					record = session.get(ParcelRecord, int(existing_id))
				except (TypeError, ValueError):
					record = None
			if record is None:
				record = ParcelRecord.from_record_data(record_data)
				session.add(record)
			else:
				record.apply_record_data(record_data)
			session.commit()
			parcel_id = str(record.id)
			logger.info("Saved parcel %s", parcel_id)
			return parcel_id
		except SQLAlchemyError as e:
			session.rollback()
			raise PersistenceError(f"Failed to save parcel: {e}") from e
		finally:
			session.close()

	def load(self):
		"""All stored parcels, oldest first, as record dicts"""
		session = self.get_session()
		try:
			records = session.query(ParcelRecord).order_by(ParcelRecord.created_at, ParcelRecord.id).all()
			return [record.to_dict() for record in records]
		except SQLAlchemyError as e:
			raise PersistenceError(f"Failed to load parcels: {e}") from e
		finally:
			session.close()

	def get(self, parcel_id):
		session = self.get_session()
		try:
			record = session.get(ParcelRecord, int(parcel_id))
			return record.to_dict() if record else None
		except SQLAlchemyError as e:
			raise PersistenceError(f"Failed to load parcel {parcel_id}: {e}") from e
		finally:
			session.close()

	def delete(self, parcel_id):
		"""Delete a parcel. Returns False when it does not exist."""
		session = self.get_session()
		try:
			record = session.get(ParcelRecord, int(parcel_id))
			if record is None:
				return False
			session.delete(record)
			session.commit()
			logger.info("Deleted parcel %s", parcel_id)
			return True
		except SQLAlchemyError as e:
			session.rollback()
			raise PersistenceError(f"Failed to delete parcel {parcel_id}: {e}") from e
		finally:
			session.close()

	def get_summary(self):
		"""Count and total area of stored parcels"""
		records = self.load()
		total_area = sum(r.get('areaInMetersSquared') or 0.0 for r in records)
		return {
			'parcels': len(records),
			'legacy': sum(1 for r in records if 'center' not in r),
			'total_area_m2': total_area,
		}
