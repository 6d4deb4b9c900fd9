"""
Settings Manager - Handles application settings persistence using QSettings
"""

import os
from PySide6.QtCore import QSettings

from ..calculations.parcel_constants import DRAG_UPDATE_DEBOUNCE_MS, HIT_TEST_RADIUS_PX


class SettingsManager:
    """Manages application settings using QSettings"""

    ORGANIZATION = "Parcel Editor"
    APPLICATION = "Parcel Editor"

    # Settings keys
    KEY_DATABASE_CUSTOM_PATH = "database/custom_path"
    KEY_DATABASE_USE_CUSTOM_PATH = "database/use_custom_path"
    KEY_DRAG_DEBOUNCE_MS = "editor/drag_debounce_ms"
    KEY_HIT_TOLERANCE_PX = "editor/hit_tolerance_px"

    def __init__(self, settings=None):
        """Initialize the settings manager

        Args:
            settings: Optional QSettings instance (tests pass an INI-backed one)
        """
        self.settings = settings or QSettings(SettingsManager.ORGANIZATION, SettingsManager.APPLICATION)

    def get_database_path(self):
        """
        Get the custom database path from settings, or None if not set

        Returns:
            str or None: Custom database path, or None if using default
        """
        use_custom = self.settings.value(self.KEY_DATABASE_USE_CUSTOM_PATH, False, type=bool)
        if use_custom:
            custom_path = self.settings.value(self.KEY_DATABASE_CUSTOM_PATH, None, type=str)
            if custom_path and os.path.exists(os.path.dirname(custom_path)):
                return custom_path
        return None

    def set_database_path(self, db_path):
        """Remember ``db_path`` as the parcel database; a falsy path reverts to the default"""
        if not db_path:
            self.clear_database_path()
            return
        self.settings.setValue(self.KEY_DATABASE_CUSTOM_PATH, str(db_path))
        self.settings.setValue(self.KEY_DATABASE_USE_CUSTOM_PATH, True)
        self.settings.sync()

    def clear_database_path(self):
        self.settings.remove(self.KEY_DATABASE_CUSTOM_PATH)
        self.settings.setValue(self.KEY_DATABASE_USE_CUSTOM_PATH, False)
        self.settings.sync()

    def is_using_custom_path(self):
        return self.get_database_path() is not None

    def get_drag_debounce_ms(self):
        """Delay before a drag update is applied (ms); PARCEL_DRAG_DEBOUNCE_MS overrides"""
        env_val = os.environ.get("PARCEL_DRAG_DEBOUNCE_MS")
        if env_val:
            try:
                return max(0, int(env_val))
            except ValueError:
                pass
        return self.settings.value(self.KEY_DRAG_DEBOUNCE_MS, DRAG_UPDATE_DEBOUNCE_MS, type=int)

    def set_drag_debounce_ms(self, delay_ms):
        self.settings.setValue(self.KEY_DRAG_DEBOUNCE_MS, int(delay_ms))
        self.settings.sync()

    def get_hit_tolerance_px(self):
        return self.settings.value(self.KEY_HIT_TOLERANCE_PX, HIT_TEST_RADIUS_PX, type=float)

    def set_hit_tolerance_px(self, tolerance_px):
        self.settings.setValue(self.KEY_HIT_TOLERANCE_PX, float(tolerance_px))
        self.settings.sync()


# Global instance
_settings_manager = None


def get_settings_manager():
    """Get the global settings manager instance"""
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager
