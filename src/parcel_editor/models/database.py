"""
Database setup and configuration using SQLAlchemy
Handles default, custom and in-memory database locations
"""

import logging
import os
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..utils.general_utils import ensure_user_data_directory

logger = logging.getLogger(__name__)

# Create base class for declarative models
Base = declarative_base()

# Global session factory
SessionLocal = None
engine = None

MEMORY_DATABASE = ":memory:"


def _default_database_path(settings_manager=None):
	# Check for custom database path from settings
	try:
		if settings_manager is None:
			from ..utils.settings_manager import get_settings_manager
			settings_manager = get_settings_manager()
		custom_path = settings_manager.get_database_path()
		if custom_path:
			logger.info("Using custom database path from settings: %s", custom_path)
			return custom_path
	except Exception as e:
		logger.warning("Could not load custom database path from settings: %s", e)
	return os.path.join(ensure_user_data_directory(), "parcel_editor.db")


def initialize_database(db_path=None, settings_manager=None):
	"""Initialize the database connection and create tables

	Args:
		db_path: SQLite file path, ":memory:" for a throwaway database, or
			None for the settings/user-directory default.
		settings_manager: Settings consulted for the default path (global
			settings when omitted).

	Returns:
		The database path actually used.
	"""
	global engine, SessionLocal

	if db_path is None:
		db_path = _default_database_path(settings_manager)

	# If engine already exists and is using the same path, don't reinitialize
	if engine is not None and db_path != MEMORY_DATABASE:
		if str(engine.url) == f'sqlite:///{db_path}':
			logger.debug("Database already initialized: %s", db_path)
			return db_path
		logger.warning("Database path changed from %s to %s, reinitializing", engine.url, db_path)
	if engine is not None:
		engine.dispose()

	if db_path == MEMORY_DATABASE:
		# One shared connection so every session sees the same in-memory data
		engine = create_engine(
			'sqlite://',
			echo=False,
			connect_args={'check_same_thread': False},
			poolclass=StaticPool,
		)
	else:
		engine = create_engine(f'sqlite:///{db_path}', echo=False)

	# Enable foreign key constraints for SQLite
	@event.listens_for(engine, "connect")
	def set_sqlite_pragma(dbapi_connection, connection_record):
		cursor = dbapi_connection.cursor()
		cursor.execute("PRAGMA foreign_keys=ON")
		cursor.close()

	# expire_on_commit=False keeps loaded attributes usable after the
	# session closes.
	SessionLocal = sessionmaker(
		autocommit=False,
		autoflush=False,
		expire_on_commit=False,
		bind=engine,
	)

	# Import all models to ensure they're registered
	from . import parcel_record  # noqa: F401

	Base.metadata.create_all(bind=engine)
	logger.info("Database initialized: %s", db_path)
	return db_path


def get_session():
	"""Get a new database session"""
	if SessionLocal is None:
		raise RuntimeError("Database not initialized. Call initialize_database() first.")
	return SessionLocal()


@contextmanager
def session_scope():
	"""Context manager with commit on success, rollback on error and cleanup

	Usage:
		with session_scope() as session:
			session.add(record)
	"""
	session = get_session()
	try:
		yield session
		session.commit()
	except Exception as e:
		session.rollback()
		logger.debug("Session rolled back due to error: %s", e)
		raise
	finally:
		session.close()


def close_database():
	"""Close the database connection"""
	global engine, SessionLocal
	if engine:
		engine.dispose()
	engine = None
	SessionLocal = None
