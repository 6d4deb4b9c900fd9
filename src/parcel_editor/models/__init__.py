"""
Data models for the Parcel Editor
"""

from .database import Base, initialize_database, get_session, session_scope, close_database
from .rectangle import RectangleModel, AreaIncreaseEvent
from .parcel_record import ParcelRecord, ParcelRecordManager, PersistenceError

__all__ = [
	'Base',
	'initialize_database',
	'get_session',
	'session_scope',
	'close_database',
	'RectangleModel',
	'AreaIncreaseEvent',
	'ParcelRecord',
	'ParcelRecordManager',
	'PersistenceError',
]
