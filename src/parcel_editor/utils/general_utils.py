"""
Utility functions for the Parcel Editor
Includes deployment detection, user data directory and logging setup
"""

import logging
import os
import sys
from typing import Optional


def is_bundled_executable():
    """
    Detect if running as a bundled executable (PyInstaller)
    Returns True if bundled, False if running from source
    """
    return getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS')


def get_user_data_directory():
    """
    Get the user data directory for storing the parcel database

    Returns:
        str: Absolute path to user data directory
    """
    return os.path.expanduser("~/Documents/ParcelEditor")


def ensure_user_data_directory():
    """
    Ensure the user data directory exists

    Returns:
        str: Absolute path to created user data directory
    """
    user_dir = get_user_data_directory()
    os.makedirs(user_dir, exist_ok=True)
    return user_dir


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the logger for the 'parcel_editor' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    logger = logging.getLogger("parcel_editor")
    logger.setLevel(level)

    # Avoid duplicate handlers when the app restarts in the same process
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized (bundled=%s)", is_bundled_executable())
