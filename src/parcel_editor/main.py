#!/usr/bin/env python3
"""
Parcel Editor - Main Application Entry Point
Desktop map editor for sizing and rotating a land parcel rectangle
"""

import logging
import os
import sys

from PySide6.QtWidgets import QApplication, QFileDialog, QMainWindow, QStyleFactory
from PySide6.QtGui import QKeySequence, QShortcut

from parcel_editor.calculations.coordinate_converter import Position
from parcel_editor.calculations.area_calculator import format_area
from parcel_editor.drawing import GeoJsonRenderer, MapGestureService, ParcelOverlay, RectangleController
from parcel_editor.models import ParcelRecordManager, PersistenceError, get_session, initialize_database
from parcel_editor.utils import setup_logging
from parcel_editor.utils.settings_manager import get_settings_manager

logger = logging.getLogger("parcel_editor.main")

DEFAULT_VIEW_CENTER = Position(-97.7431, 30.2672)
DEFAULT_VIEW_ZOOM = 17.0


class ParcelEditorWindow(QMainWindow):
    """Map overlay plus a status bar; P places, drag handles to edit, Ctrl+S saves"""

    def __init__(self, manager: ParcelRecordManager, settings_manager=None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Parcel Editor")
        self.resize(1024, 768)
        self.manager = manager
        self.settings_manager = settings_manager or get_settings_manager()

        self.renderer = GeoJsonRenderer(self)
        self.overlay = ParcelOverlay(self.renderer, DEFAULT_VIEW_CENTER, DEFAULT_VIEW_ZOOM, parent=self)
        self.map_service = MapGestureService(self.overlay)
        self.controller = RectangleController(self.renderer, self.map_service,
                                              settings_manager=self.settings_manager, parent=self)
        self.overlay.set_controller(self.controller)
        self.setCentralWidget(self.overlay)

        self.controller.rectangle_changed.connect(self.on_rectangle_changed)
        self.controller.validation_failed.connect(self.on_validation_failed)
        self.controller.render_failed.connect(lambda message: self.statusBar().showMessage(message, 5000))

        self.save_shortcut = QShortcut(QKeySequence.Save, self)
        self.save_shortcut.activated.connect(self.save_parcel)
        self.create_menus()

        try:
            self.controller.load_saved(self.manager)
        except PersistenceError as e:
            logger.error("Could not load saved parcels: %s", e)
        self.statusBar().showMessage("Press P and click the map to place a parcel")

    def create_menus(self):
        file_menu = self.menuBar().addMenu("&File")
        self.open_database_action = file_menu.addAction("&Open Database...")
        self.open_database_action.triggered.connect(self.choose_database)
        self.default_database_action = file_menu.addAction("Use &Default Database")
        self.default_database_action.triggered.connect(lambda: self.switch_database(None))
        self.default_database_action.setEnabled(self.settings_manager.is_using_custom_path())

    def on_rectangle_changed(self, rectangle):
        if rectangle is None:
            self.statusBar().showMessage("No parcel")
            return
        self.statusBar().showMessage(
            f"{rectangle.width_meters:.1f} x {rectangle.height_meters:.1f} m, "
            f"{rectangle.rotation_degrees:.1f} deg, {format_area(rectangle.area_in_acres)}"
        )

    def on_validation_failed(self):
        self.statusBar().showMessage("Parcel must be at least 1 acre", 3000)

    def save_parcel(self):
        if self.controller.rectangle is None:
            return
        try:
            parcel_id = self.controller.save(self.manager)
            self.controller.load_saved(self.manager)
            self.statusBar().showMessage(f"Saved parcel {parcel_id}", 3000)
        except PersistenceError as e:
            logger.error("Save failed: %s", e)
            self.statusBar().showMessage(f"Save failed: {e}", 5000)

    def choose_database(self):
        current = self.settings_manager.get_database_path()
        start_dir = os.path.dirname(current) if current else os.path.expanduser("~/Documents")
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            "Open Parcel Database",
            os.path.join(start_dir, "parcel_editor.db"),
            "Database Files (*.db);;All Files (*)",
            options=QFileDialog.DontConfirmOverwrite,
        )
        if file_path:
            self.switch_database(file_path)

    def switch_database(self, db_path):
        try:
            used_path = self.use_database(db_path)
            self.statusBar().showMessage(f"Using database {used_path}", 5000)
        except Exception as e:
            logger.error("Could not switch database: %s", e)
            self.statusBar().showMessage(f"Could not open database: {e}", 5000)

    def use_database(self, db_path=None):
        """Store parcels in ``db_path`` from now on (None: default location).

        The choice is remembered in settings, the unsaved parcel is dropped
        and the saved layer is reloaded from the new database. Returns the
        database path in use.
        """
        if db_path:
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
            used_path = initialize_database(db_path)
            self.settings_manager.set_database_path(db_path)
        else:
            self.settings_manager.clear_database_path()
            used_path = initialize_database(None, self.settings_manager)
        self.controller.clear()
        try:
            self.controller.load_saved(self.manager)
        except PersistenceError as e:
            logger.error("Could not load saved parcels: %s", e)
        self.default_database_action.setEnabled(self.settings_manager.is_using_custom_path())
        logger.info("Using database %s", used_path)
        return used_path

    def closeEvent(self, event):
        self.map_service.unbind()
        self.controller.dispose()
        super().closeEvent(event)


class ParcelEditorApp(QApplication):
    """Main application class"""

    def __init__(self, argv):
        super().__init__(argv)
        self.setApplicationName("Parcel Editor")
        self.setApplicationVersion("1.0.0")
        self.setOrganizationName("Parcel Editor")

        # Set application style
        self.setStyle(QStyleFactory.create('Fusion'))

        self.main_window = None

    def start(self):
        """Start the application"""
        level = logging.DEBUG if os.environ.get("PARCEL_DEBUG") else logging.INFO
        setup_logging(level)
        settings_manager = get_settings_manager()
        db_path = initialize_database(settings_manager=settings_manager)
        logger.info("Using database %s", db_path)

        self.main_window = ParcelEditorWindow(ParcelRecordManager(get_session), settings_manager)
        self.main_window.show()
        return self.exec()


def main():
    """Application entry point"""
    app = ParcelEditorApp(sys.argv)
    return app.start()


if __name__ == '__main__':
    sys.exit(main())
