"""
Utils package - Configuration, logging and environment helpers for the Parcel Editor
"""

from .settings_manager import SettingsManager, get_settings_manager
from .debug_logger import ParcelDebugLogger, get_debug_logger
from .general_utils import (
    is_bundled_executable,
    get_user_data_directory,
    ensure_user_data_directory,
    setup_logging,
)

__all__ = [
    'SettingsManager',
    'get_settings_manager',
    'ParcelDebugLogger',
    'get_debug_logger',
    'is_bundled_executable',
    'get_user_data_directory',
    'ensure_user_data_directory',
    'setup_logging',
]
