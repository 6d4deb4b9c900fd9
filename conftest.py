"""
Shared pytest fixtures: offscreen Qt, in-memory database, INI-backed settings
"""

import os
import sys

import pytest

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))


@pytest.fixture(scope='session')
def qapp():
    """One QApplication for the whole test run"""
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database; yields the session factory"""
    from parcel_editor.models.database import close_database, get_session, initialize_database
    initialize_database(':memory:')
    yield get_session
    close_database()


@pytest.fixture
def settings_manager(tmp_path):
    """SettingsManager backed by a throwaway INI file"""
    from PySide6.QtCore import QSettings
    from parcel_editor.utils.settings_manager import SettingsManager
    settings = QSettings(str(tmp_path / 'parcel_editor.ini'), QSettings.IniFormat)
    return SettingsManager(settings)
