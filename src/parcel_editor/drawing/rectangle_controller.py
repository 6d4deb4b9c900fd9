"""
Rectangle Controller - Placement, selection and handle dragging for one parcel
"""

import logging
import math
from enum import Enum
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from ..calculations.coordinate_converter import Position, bearing_degrees, distance_in_meters
from ..calculations.parcel_constants import MIN_SCALE_FACTOR, MINIMUM_AREA_METERS_SQUARED
from ..models.rectangle import AreaIncreaseEvent, RectangleModel
from ..utils.debug_logger import get_debug_logger
from .debounce import DebouncedUpdate
from .hit_test import HandleType, hit_test_handle
from .map_binding import MapGestureService

logger = logging.getLogger(__name__)


class DrawingState(Enum):
    """Editor states"""
    IDLE = "idle"
    PLACEMENT = "placement"
    SELECTED = "selected"    # a rectangle exists and no gesture is active
    DRAGGING = "dragging"


class RectangleController(QObject):
    """Owns the current rectangle and turns pointer gestures into validated edits.

    Every drag update builds a candidate rectangle from the last committed
    one. Candidates below the minimum parcel area are discarded and the
    committed rectangle is kept; accepted candidates that grew the parcel
    get an AreaIncreaseEvent appended to their history.
    """

    # Signals
    validation_failed = Signal()          # A drag candidate was below the minimum area
    area_increased = Signal(object)       # AreaIncreaseEvent
    rectangle_changed = Signal(object)    # RectangleModel or None
    state_changed = Signal(object)        # DrawingState
    render_failed = Signal(str)           # Renderer raised; model untouched

    def __init__(self, renderer, map_service: MapGestureService, debounce_ms: Optional[int] = None,
                 hit_tolerance_px: Optional[float] = None, settings_manager=None, parent=None):
        super().__init__(parent)
        self.renderer = renderer
        self.map_service = map_service

        if debounce_ms is None or hit_tolerance_px is None:
            if settings_manager is None:
                from ..utils.settings_manager import get_settings_manager
                settings_manager = get_settings_manager()
            if debounce_ms is None:
                debounce_ms = settings_manager.get_drag_debounce_ms()
            if hit_tolerance_px is None:
                hit_tolerance_px = settings_manager.get_hit_tolerance_px()
        self.hit_tolerance_px = float(hit_tolerance_px)

        self._debouncer = DebouncedUpdate(self._apply_drag_update, debounce_ms, parent=self)
        self._debug = get_debug_logger()

        self._rectangle: Optional[RectangleModel] = None
        self._state = DrawingState.IDLE
        self._is_selected = False
        self._saved_parcels: List[RectangleModel] = []
        self._disposed = False

        # Drag state
        self._active_handle: Optional[HandleType] = None
        self._last_valid: Optional[RectangleModel] = None
        self._tapped_handle: Optional[HandleType] = None

    # ---------------------- Properties ----------------------
    @property
    def rectangle(self) -> Optional[RectangleModel]:
        return self._rectangle

    @property
    def state(self) -> DrawingState:
        return self._state

    @property
    def is_selected(self) -> bool:
        return self._is_selected

    @property
    def is_dragging(self) -> bool:
        return self._state is DrawingState.DRAGGING

    @property
    def active_handle(self) -> Optional[HandleType]:
        return self._active_handle

    @property
    def tapped_handle(self) -> Optional[HandleType]:
        """Handle hit by the last handle_map_tap, if any"""
        return self._tapped_handle

    @property
    def saved_parcels(self) -> List[RectangleModel]:
        return list(self._saved_parcels)

    @property
    def debounce_ms(self) -> int:
        return self._debouncer.delay_ms

    # ---------------------- Placement / selection ----------------------
    def enter_placement_mode(self):
        if self._state is DrawingState.DRAGGING:
            self.cancel_drag()
        self._set_state(DrawingState.PLACEMENT)
        logger.debug("Placement mode entered")

    def create_at(self, center: Position) -> RectangleModel:
        """Place the default 20x20 m parcel at ``center`` and select it.

        The default parcel is smaller than the minimum area; only later
        edits are validated.
        """
        if self._state is DrawingState.DRAGGING:
            self.cancel_drag()
        rectangle = RectangleModel.default_at(Position(*center))
        self._rectangle = rectangle
        self._is_selected = True
        self._set_state(DrawingState.SELECTED)
        self._render_all()
        self.rectangle_changed.emit(rectangle)
        logger.info("Created parcel %s at (%.6f, %.6f)", rectangle.id, rectangle.center.lng, rectangle.center.lat)
        return rectangle

    def handle_map_tap(self, position: Position) -> bool:
        """Route a tap on the map. Returns True when the tap was consumed."""
        self._tapped_handle = None
        if self._state is DrawingState.PLACEMENT:
            self.create_at(position)
            return True
        if self._rectangle is None:
            return False

        handle = self.hit_test(position)
        if handle is not None:
            self._tapped_handle = handle
            self.set_selected(True)
            return True
        if self._rectangle.contains_point(position[0], position[1]):
            self.set_selected(True)
            return True
        self.set_selected(False)
        return False

    def hit_test(self, position: Position) -> Optional[HandleType]:
        if self._rectangle is None or not self.map_service.is_bound:
            return None
        return hit_test_handle(Position(*position), self._rectangle,
                               self.map_service.pixel_for_coordinate, self.hit_tolerance_px)

    def set_selected(self, selected: bool):
        selected = bool(selected) and self._rectangle is not None
        self._is_selected = selected
        self._render(lambda: self.renderer.set_selected(selected))
        self._render(lambda: self.renderer.update_handles(self._rectangle, selected))

    # ---------------------- Dragging ----------------------
    def start_drag(self, handle: HandleType, pointer: Optional[Position] = None):
        if self._rectangle is None:
            logger.debug("start_drag ignored, no rectangle")
            return
        if self._state is DrawingState.DRAGGING:
            # Finish the previous gesture before starting a new one
            self.end_drag()
        self._active_handle = handle
        self._last_valid = self._rectangle
        self.map_service.suspend_gestures()
        if not self._is_selected:
            self.set_selected(True)
        self._set_state(DrawingState.DRAGGING)
        self._debug.debug("RectangleController", "Drag started", {
            'handle': handle.name,
            'area_m2': self._rectangle.area,
        })

    def update_drag(self, pointer: Position):
        """Queue a pointer position; only the latest one before the next tick is applied."""
        if self._state is not DrawingState.DRAGGING or self._active_handle is None:
            return
        self._debouncer.schedule(Position(*pointer))

    def end_drag(self):
        if self._state is not DrawingState.DRAGGING:
            self.map_service.restore_gestures()
            return
        handle = self._active_handle
        try:
            self._debouncer.flush()
        finally:
            self._clear_drag_state()
            self.map_service.restore_gestures()
            self._set_state(DrawingState.SELECTED if self._rectangle is not None else DrawingState.IDLE)
        self._debug.debug("RectangleController", "Drag ended", {
            'handle': handle.name if handle else None,
            'area_m2': self._rectangle.area if self._rectangle else None,
        })

    def cancel_drag(self):
        """Drop any queued update and hand gestures back to the map."""
        self._debouncer.cancel()
        was_dragging = self._state is DrawingState.DRAGGING
        self._clear_drag_state()
        self.map_service.restore_gestures()
        if was_dragging:
            self._set_state(DrawingState.SELECTED if self._rectangle is not None else DrawingState.IDLE)

    def _clear_drag_state(self):
        self._active_handle = None
        self._last_valid = None

    def _apply_drag_update(self, pointer: Position):
        if self._state is not DrawingState.DRAGGING or self._active_handle is None:
            return
        committed = self._last_valid or self._rectangle
        if committed is None:
            return

        candidate = self.compute_candidate(committed, self._active_handle, pointer)
        accepted = candidate.area >= MINIMUM_AREA_METERS_SQUARED
        self._debug.log_drag_update("RectangleController", self._active_handle.name, accepted,
                                    committed.area, candidate.area)

        if not accepted:
            # Roll back to the last committed rectangle
            self._rectangle = committed
            self._render(lambda: self.renderer.update(committed))
            self._render(lambda: self.renderer.update_handles(committed, self._is_selected))
            self.validation_failed.emit()
            return

        event = None
        if candidate.area > committed.area:
            event = AreaIncreaseEvent.between(committed.area, candidate.area)
            candidate = candidate.record_area_increase(event)

        self._rectangle = candidate
        self._last_valid = candidate
        self._render(lambda: self.renderer.update(candidate))
        self._render(lambda: self.renderer.update_handles(candidate, self._is_selected))
        self.rectangle_changed.emit(candidate)
        if event is not None:
            self.area_increased.emit(event)

    @staticmethod
    def compute_candidate(rectangle: RectangleModel, handle: HandleType, pointer: Position) -> RectangleModel:
        """Rectangle the pointer asks for, before validation.

        Side handles scale uniformly so the half diagonal follows the
        pointer distance; the rotation handle points the rectangle at the
        pointer bearing.
        """
        pointer = Position(*pointer)
        if handle is HandleType.ROTATION:
            return rectangle.copy_with(rotation_degrees=bearing_degrees(rectangle.center, pointer))

        half_diagonal = math.hypot(rectangle.width_meters / 2.0, rectangle.height_meters / 2.0)
        distance = distance_in_meters(rectangle.center, pointer)
        scale = max(MIN_SCALE_FACTOR, distance / half_diagonal)
        return rectangle.copy_with(
            width_meters=rectangle.width_meters * scale,
            height_meters=rectangle.height_meters * scale,
        )

    # ---------------------- Lifecycle ----------------------
    def clear(self):
        if self._state is DrawingState.DRAGGING:
            self.cancel_drag()
        self._rectangle = None
        self._is_selected = False
        self._tapped_handle = None
        self._render_all()
        self._set_state(DrawingState.IDLE)
        self.rectangle_changed.emit(None)

    def dispose(self):
        """Release timers, map gestures and renderer resources"""
        if self._disposed:
            return
        self._debouncer.cancel()
        self._clear_drag_state()
        self.map_service.restore_gestures()
        self._render(self.renderer.dispose)
        self._rectangle = None
        self._is_selected = False
        self._disposed = True
        self._set_state(DrawingState.IDLE)
        logger.debug("RectangleController disposed")

    # ---------------------- Persistence ----------------------
    def save(self, manager) -> str:
        """Store the current rectangle; PersistenceError from the manager propagates."""
        if self._rectangle is None:
            raise ValueError("No parcel to save")
        parcel_id = manager.save(self._rectangle.to_persistence())
        self._rectangle = self._rectangle.copy_with(persisted_id=parcel_id)
        if self._last_valid is not None:
            self._last_valid = self._last_valid.copy_with(persisted_id=parcel_id)
        self.rectangle_changed.emit(self._rectangle)
        logger.info("Parcel %s saved as %s", self._rectangle.id, parcel_id)
        return parcel_id

    def load_from_persisted(self, data) -> RectangleModel:
        """Replace the current rectangle with a stored one, handles hidden"""
        rectangle = RectangleModel.from_persisted(data)
        if self._state is DrawingState.DRAGGING:
            self.cancel_drag()
        self._rectangle = rectangle
        self._is_selected = False
        self._render_all()
        self._set_state(DrawingState.SELECTED)
        self.rectangle_changed.emit(rectangle)
        return rectangle

    def load_saved(self, manager) -> List[RectangleModel]:
        """Reconstruct every stored parcel and show them on the saved layer"""
        rectangles = []
        for record in manager.load():
            try:
                rectangles.append(RectangleModel.from_persisted(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable parcel %s: %s", record.get('id'), e)
        self._saved_parcels = rectangles
        self._render(lambda: self.renderer.update_saved(rectangles))
        return list(rectangles)

    def delete_saved(self, manager, parcel_id) -> bool:
        parcel_id = str(parcel_id)
        deleted = manager.delete(parcel_id)
        if deleted:
            self._saved_parcels = [r for r in self._saved_parcels if r.persisted_id != parcel_id]
            self._render(lambda: self.renderer.update_saved(self._saved_parcels))
            if self._rectangle is not None and self._rectangle.persisted_id == parcel_id:
                self.clear()
        return deleted

    # ---------------------- Internals ----------------------
    def _set_state(self, state: DrawingState):
        if state is self._state:
            return
        self._state = state
        self.state_changed.emit(state)

    def _render_all(self):
        rectangle = self._rectangle
        selected = self._is_selected
        self._render(lambda: self.renderer.update(rectangle))
        self._render(lambda: self.renderer.set_selected(selected))
        self._render(lambda: self.renderer.update_handles(rectangle, selected))

    def _render(self, call):
        try:
            call()
        except Exception as e:
            logger.error("Renderer update failed: %s", e)
            self.render_failed.emit(str(e))
