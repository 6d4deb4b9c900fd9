#!/usr/bin/env python3
"""
Tests for QSettings-backed configuration, the debug logger and database setup
"""

import logging

from parcel_editor.models import database
from parcel_editor.utils.debug_logger import get_debug_logger


def test_editor_defaults(settings_manager, monkeypatch):
    monkeypatch.delenv('PARCEL_DRAG_DEBOUNCE_MS', raising=False)
    assert settings_manager.get_drag_debounce_ms() == 16
    assert settings_manager.get_hit_tolerance_px() == 15.0


def test_editor_values_persist(settings_manager, monkeypatch):
    monkeypatch.delenv('PARCEL_DRAG_DEBOUNCE_MS', raising=False)
    settings_manager.set_drag_debounce_ms(33)
    settings_manager.set_hit_tolerance_px(20)
    assert settings_manager.get_drag_debounce_ms() == 33
    assert settings_manager.get_hit_tolerance_px() == 20.0


def test_environment_overrides_debounce(settings_manager, monkeypatch):
    monkeypatch.setenv('PARCEL_DRAG_DEBOUNCE_MS', '50')
    assert settings_manager.get_drag_debounce_ms() == 50
    monkeypatch.setenv('PARCEL_DRAG_DEBOUNCE_MS', 'fast')
    assert settings_manager.get_drag_debounce_ms() == 16


def test_custom_database_path(settings_manager, tmp_path):
    assert settings_manager.get_database_path() is None
    db_file = str(tmp_path / 'parcels.db')
    settings_manager.set_database_path(db_file)
    assert settings_manager.is_using_custom_path()
    assert settings_manager.get_database_path() == db_file
    settings_manager.clear_database_path()
    assert settings_manager.get_database_path() is None
    assert not settings_manager.is_using_custom_path()

    settings_manager.set_database_path(db_file)
    settings_manager.set_database_path('')
    assert settings_manager.get_database_path() is None


def test_file_database_is_created(tmp_path):
    db_file = str(tmp_path / 'parcels.db')
    try:
        assert database.initialize_database(db_file) == db_file
        # Same path is a no-op
        assert database.initialize_database(db_file) == db_file
        with database.session_scope() as session:
            assert session.execute(database.Base.metadata.tables['parcel_records'].select()).fetchall() == []
    finally:
        database.close_database()
    assert (tmp_path / 'parcels.db').exists()


def test_debug_logger_tags_component(monkeypatch, tmp_path):
    log_file = tmp_path / 'debug.log'
    monkeypatch.setenv('PARCEL_DEBUG', '1')
    monkeypatch.setenv('PARCEL_DEBUG_FILE', str(log_file))
    debug = get_debug_logger()
    debug.reconfigure()
    try:
        debug.log_drag_update('RectangleController', 'SIDE_TOP', False, 5000.0, 400.0)
        for handler in debug.logger.handlers:
            handler.flush()
        text = log_file.read_text()
        assert 'RectangleController: Drag update rejected' in text
        assert '"candidate_area_m2":"400.00"' in text
    finally:
        monkeypatch.delenv('PARCEL_DEBUG')
        monkeypatch.delenv('PARCEL_DEBUG_FILE')
        for handler in debug.logger.handlers:
            handler.close()
        debug.reconfigure()
    assert not debug.debug_enabled
    assert debug.logger.level == logging.DEBUG
