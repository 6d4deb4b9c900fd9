"""
Debug logging framework for the parcel editor
Centralizes and standardizes drag/validation trace output
"""

import os
import logging
import json
from typing import Any, Dict, Optional


class ParcelDebugLogger:
    """Component-tagged debug logger, enabled through PARCEL_DEBUG"""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._setup_logger()
            ParcelDebugLogger._initialized = True

    def _setup_logger(self):
        """Initialize the logging configuration"""
        env_val = str(os.environ.get("PARCEL_DEBUG", "")).strip().lower()
        self.debug_enabled = env_val in {"1", "true", "yes", "on"}

        debug_level = os.environ.get("PARCEL_DEBUG_LEVEL", "DEBUG").upper()

        self.logger = logging.getLogger('parcel_editor.debug')
        self.logger.setLevel(getattr(logging, debug_level, logging.DEBUG))
        self.logger.handlers.clear()
        # Keep traces out of the application's root handlers
        self.logger.propagate = False

        if self.debug_enabled:
            formatter = logging.Formatter(
                '%(asctime)s [PARCEL-%(levelname)s] %(component)s: %(message)s',
                datefmt='%H:%M:%S'
            )
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.DEBUG)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

            log_file = os.environ.get("PARCEL_DEBUG_FILE")
            if log_file:
                file_handler = logging.FileHandler(log_file)
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

    def reconfigure(self):
        """Re-read the environment (used after changing PARCEL_DEBUG at runtime)"""
        self._setup_logger()

    def _emit(self, level: int, component: str, message: str, data: Optional[Dict[str, Any]] = None):
        if not self.debug_enabled:
            return
        if data:
            message = f"{message} {self._format_debug_data(data)}"
        self.logger.log(level, message, extra={'component': component})

    def debug(self, component: str, message: str, data: Optional[Dict[str, Any]] = None):
        self._emit(logging.DEBUG, component, message, data)

    def _format_debug_data(self, data: Dict[str, Any]) -> str:
        """Format debug data for logging"""
        try:
            formatted = {}
            for key, value in data.items():
                if key.endswith('_m2') or key.endswith('_meters') or key.endswith('_degrees'):
                    formatted[key] = f"{float(value):.2f}" if isinstance(value, (int, float)) else value
                elif key in ['lng', 'lat']:
                    formatted[key] = f"{float(value):.6f}" if isinstance(value, (int, float)) else value
                else:
                    formatted[key] = value
            return json.dumps(formatted, separators=(',', ':'), default=str)
        except (TypeError, ValueError):
            return str(data)

    def log_drag_update(self, component: str, handle: str, accepted: bool,
                        previous_area: float, candidate_area: float):
        """Log the outcome of one applied drag update"""
        self.debug(component, "Drag update " + ("committed" if accepted else "rejected"), {
            'handle': handle,
            'previous_area_m2': previous_area,
            'candidate_area_m2': candidate_area,
        })


def get_debug_logger() -> ParcelDebugLogger:
    return ParcelDebugLogger()
