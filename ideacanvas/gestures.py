"""Multi-touch gesture classification for the notes canvas.

One :class:`GestureClassifier` owns every piece of gesture state for a canvas:
the active touches, the per-note records (looked up by note id), the pinch or
pan baseline and the pending tap. Pointer events come in through the
``touch*`` slots; the classifier then either mutates the note model (drag
commit), mutates the viewport (pan/zoom) or emits a request signal (open the
editor, tap on empty canvas).

Rules:

* A single touch over a note becomes a drag after moving past the drag
  threshold or when the long-press timer fires, whichever comes first.
* A second touch always wins: a running note drag is dropped without touching
  the note, and a pinch starts on the same event.
* After a pinch, a remaining finger keeps panning the canvas until every
  finger lifts; it never turns into a note drag.
* Every way out of a touch sequence resets the visual drag offset to zero.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from PySide6.QtCore import Property, QObject, Signal, Slot

from .config import CanvasConfig
from .deferred import DeferredCall
from .errors import UnknownNoteError
from .model import NoteModel
from .transform import distance, midpoint, screen_delta_to_logical, zoom_around
from .types import NoteGestureState, PanBaseline, PinchBaseline, TouchPoint
from .viewport import CanvasViewport

logger = logging.getLogger(__name__)

CANVAS_TARGET = ""


class GestureState(Enum):
    IDLE = "idle"
    POSSIBLE_NOTE_DRAG = "possibleNoteDrag"
    POSSIBLE_CANVAS_GESTURE = "possibleCanvasGesture"
    NOTE_DRAGGING = "noteDragging"
    CANVAS_PANNING = "canvasPanning"
    CANVAS_PINCHING = "canvasPinching"
    TAP_PENDING = "tapPending"


_CANVAS_STATES = (GestureState.CANVAS_PANNING, GestureState.CANVAS_PINCHING)


class GestureClassifier(QObject):
    """Turn raw touch events into note drags, taps and canvas pan/zoom."""

    stateChanged = Signal()
    dragDeltaChanged = Signal()
    editorRequested = Signal(str, arguments=["noteId"])
    canvasTapped = Signal(float, float, arguments=["x", "y"])
    canvasGestureStarted = Signal()
    canvasGestureFinished = Signal()

    def __init__(
        self,
        model: NoteModel,
        viewport: CanvasViewport,
        config: Optional[CanvasConfig] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._model = model
        self._viewport = viewport
        self._config = config or CanvasConfig()

        self._state = GestureState.IDLE
        self._touches: Dict[int, Tuple[float, float]] = {}
        self._note_states: Dict[str, NoteGestureState] = {}
        self._active_note_id: Optional[str] = None
        self._pinch: Optional[PinchBaseline] = None
        self._pan: Optional[PanBaseline] = None

        self._canvas_tap_start: Tuple[float, float] = (0.0, 0.0)
        self._canvas_tap_candidate = False
        self._canvas_last_tap_ms: Optional[float] = None
        self._pending_tap_target: Optional[str] = None
        self._pending_canvas_point: Tuple[float, float] = (0.0, 0.0)

        self._long_press = DeferredCall(self._on_long_press, self)
        self._tap_timer = DeferredCall(self._on_tap_timeout, self)

        self._model.noteRemoved.connect(self._forget_note)
        self._model.modelReset.connect(self._forget_all_notes)

    # --- Properties exposed to QML -----------------------------------------
    @property
    def gesture_state(self) -> GestureState:
        return self._state

    @Property(str, notify=stateChanged)
    def state(self) -> str:
        return self._state.value

    @Property(str, notify=stateChanged)
    def activeNoteId(self) -> str:
        return self._active_note_id or ""

    @Property(float, notify=dragDeltaChanged)
    def dragDeltaX(self) -> float:
        note_state = self._active_state()
        return note_state.delta_x if note_state else 0.0

    @Property(float, notify=dragDeltaChanged)
    def dragDeltaY(self) -> float:
        note_state = self._active_state()
        return note_state.delta_y if note_state else 0.0

    def noteState(self, note_id: str) -> Optional[NoteGestureState]:
        return self._note_states.get(note_id)

    def isTapPending(self) -> bool:
        return self._tap_timer.isPending()

    # --- Touch input ----------------------------------------------------------
    @Slot(list, float)
    def touchPressed(self, points: Iterable[Any], timestamp: float) -> None:
        for point in self._coerce(points):
            self._touches[point.id] = (point.x, point.y)

        if len(self._touches) >= 2:
            self._enter_canvas_gesture()
        elif len(self._touches) == 1 and self._state in (GestureState.IDLE, GestureState.TAP_PENDING):
            self._begin_single_touch()

    @Slot(list, float)
    def touchMoved(self, points: Iterable[Any], timestamp: float) -> None:
        for point in self._coerce(points):
            if point.id in self._touches:
                self._touches[point.id] = (point.x, point.y)

        if len(self._touches) >= 2 and self._state != GestureState.CANVAS_PINCHING:
            self._enter_canvas_gesture()
            return

        if self._state in (GestureState.POSSIBLE_NOTE_DRAG, GestureState.NOTE_DRAGGING):
            self._track_note_drag()
        elif self._state == GestureState.CANVAS_PINCHING:
            self._update_pinch()
        elif self._state == GestureState.CANVAS_PANNING:
            self._update_pan()
        elif self._state == GestureState.POSSIBLE_CANVAS_GESTURE and self._touches:
            x, y = self._first_touch()
            start_x, start_y = self._canvas_tap_start
            if self._beyond_threshold(x - start_x, y - start_y):
                self._canvas_tap_candidate = False

    @Slot(list, float)
    def touchReleased(self, points: Iterable[Any], timestamp: float) -> None:
        for point in self._coerce(points):
            self._touches.pop(point.id, None)
        remaining = len(self._touches)

        if self._state == GestureState.CANVAS_PINCHING and remaining >= 2:
            self._capture_pinch_baseline()
            return
        if self._state == GestureState.CANVAS_PINCHING and remaining == 1:
            self._begin_canvas_pan()
            return
        if remaining:
            return
        self._finish_sequence(timestamp)

    @Slot()
    def touchCancelled(self) -> None:
        """The platform took the touch sequence away (interruption, window change)."""
        was_canvas = self._state in _CANVAS_STATES
        try:
            self._abort_note_gesture()
            self._cancel_pending_tap()
            if was_canvas:
                self._viewport.applyBoundaryCorrection()
                self.canvasGestureFinished.emit()
        finally:
            self._reset_sequence()
            self._set_state(GestureState.IDLE)

    # --- Single touch ---------------------------------------------------------
    def _begin_single_touch(self) -> None:
        x, y = self._first_touch()
        logical_x, logical_y = self._viewport.toLogical(x, y)
        note_id = self._model.noteIdAt(logical_x, logical_y)
        target = note_id or CANVAS_TARGET
        self._settle_pending_tap(target)

        if note_id:
            note_state = self._note_state(note_id)
            note_state.start_x = x
            note_state.start_y = y
            note_state.dragging = False
            self._active_note_id = note_id
            self._set_delta(note_state, 0.0, 0.0)
            self._long_press.start(self._config.long_press_ms)
            self._set_state(GestureState.POSSIBLE_NOTE_DRAG)
        else:
            self._canvas_tap_start = (x, y)
            self._canvas_tap_candidate = True
            self._set_state(GestureState.POSSIBLE_CANVAS_GESTURE)

    def _track_note_drag(self) -> None:
        note_state = self._active_state()
        if note_state is None or not self._touches:
            return
        x, y = self._first_touch()
        dx = x - note_state.start_x
        dy = y - note_state.start_y
        self._set_delta(note_state, dx, dy)
        if not note_state.dragging and self._beyond_threshold(dx, dy):
            self._activate_drag(note_state)

    def _activate_drag(self, note_state: NoteGestureState) -> None:
        self._long_press.cancel()
        if note_state.dragging:
            return
        try:
            self._model.beginDrag(note_state.note_id)
        except UnknownNoteError:
            logger.debug("Note %s vanished before drag start", note_state.note_id)
            self._abort_note_gesture()
            self._set_state(GestureState.IDLE)
            return
        note_state.dragging = True
        self._set_state(GestureState.NOTE_DRAGGING)

    def _on_long_press(self) -> None:
        note_state = self._active_state()
        if self._state == GestureState.POSSIBLE_NOTE_DRAG and note_state is not None:
            self._activate_drag(note_state)

    def _abort_note_gesture(self) -> None:
        """Drop the note gesture without changing the note."""
        self._long_press.cancel()
        note_state = self._active_state()
        self._active_note_id = None
        if note_state is None:
            return
        try:
            if note_state.dragging:
                self._model.cancelDrag()
        finally:
            note_state.dragging = False
            note_state.last_tap_ms = None
            self._set_delta(note_state, 0.0, 0.0, force_emit=True)

    # --- Canvas gestures ------------------------------------------------------
    def _enter_canvas_gesture(self) -> None:
        starting = self._state not in _CANVAS_STATES
        self._abort_note_gesture()
        self._cancel_pending_tap()
        self._canvas_tap_candidate = False
        self._pan = None
        self._capture_pinch_baseline()
        self._set_state(GestureState.CANVAS_PINCHING)
        if starting:
            self.canvasGestureStarted.emit()

    def _capture_pinch_baseline(self) -> None:
        first, second = self._first_two_touches()
        span = distance(first, second)
        if span <= 0:
            self._pinch = None
            return
        mid_x, mid_y = midpoint(first, second)
        transform = self._viewport.transform
        self._pinch = PinchBaseline(
            distance=span,
            mid_x=mid_x,
            mid_y=mid_y,
            scale=transform.scale,
            offset_x=transform.offset_x,
            offset_y=transform.offset_y,
        )

    def _update_pinch(self) -> None:
        if len(self._touches) < 2:
            return
        first, second = self._first_two_touches()
        span = distance(first, second)
        if span <= 0:
            return
        if self._pinch is None:
            self._capture_pinch_baseline()
            return

        base = self._pinch
        mid_x, mid_y = midpoint(first, second)
        new_scale = self._viewport.transform.clamp_scale(base.scale * (span / base.distance))
        offset_x, offset_y = zoom_around(
            (base.mid_x, base.mid_y),
            base.scale,
            new_scale,
            (base.offset_x, base.offset_y),
        )
        self._viewport.setTransform(
            new_scale,
            offset_x + (mid_x - base.mid_x),
            offset_y + (mid_y - base.mid_y),
        )

    def _begin_canvas_pan(self) -> None:
        finger_id = next(iter(self._touches))
        x, y = self._touches[finger_id]
        transform = self._viewport.transform
        self._pinch = None
        self._pan = PanBaseline(
            finger_id=finger_id,
            start_x=x,
            start_y=y,
            offset_x=transform.offset_x,
            offset_y=transform.offset_y,
        )
        self._set_state(GestureState.CANVAS_PANNING)

    def _update_pan(self) -> None:
        pan = self._pan
        if pan is None or not self._touches:
            return
        x, y = self._touches.get(pan.finger_id, self._first_touch())
        self._viewport.setTransform(
            self._viewport.transform.scale,
            pan.offset_x + (x - pan.start_x),
            pan.offset_y + (y - pan.start_y),
        )

    # --- Sequence end ---------------------------------------------------------
    def _finish_sequence(self, timestamp: float) -> None:
        state = self._state
        try:
            if state == GestureState.NOTE_DRAGGING:
                self._commit_drag()
            elif state == GestureState.POSSIBLE_NOTE_DRAG:
                self._handle_note_tap(timestamp)
            elif state in _CANVAS_STATES:
                self._viewport.applyBoundaryCorrection()
                self.canvasGestureFinished.emit()
            elif state == GestureState.POSSIBLE_CANVAS_GESTURE:
                self._handle_canvas_tap(timestamp)
        finally:
            note_state = self._active_state()
            if note_state is not None:
                note_state.dragging = False
                self._set_delta(note_state, 0.0, 0.0)
            self._reset_sequence()
            if not self.isTapPending():
                self._pending_tap_target = None
            self._set_state(GestureState.TAP_PENDING if self.isTapPending() else GestureState.IDLE)

    def _commit_drag(self) -> None:
        note_state = self._active_state()
        if note_state is None:
            return
        dx, dy = screen_delta_to_logical(
            note_state.delta_x, note_state.delta_y, self._viewport.transform.scale
        )
        note_state.last_tap_ms = None
        try:
            self._model.commitDrag(note_state.note_id, dx, dy)
        except UnknownNoteError:
            logger.debug("Dropped drag for removed note %s", note_state.note_id)
            self._model.cancelDrag()
        finally:
            note_state.dragging = False
            self._set_delta(note_state, 0.0, 0.0)

    def _handle_note_tap(self, timestamp: float) -> None:
        note_state = self._active_state()
        if note_state is None:
            return
        self._long_press.cancel()
        self._set_delta(note_state, 0.0, 0.0)
        last_tap = note_state.last_tap_ms
        if last_tap is not None and timestamp - last_tap <= self._config.double_tap_ms:
            note_state.last_tap_ms = None
            self._cancel_pending_tap()
            self.editorRequested.emit(note_state.note_id)
        else:
            note_state.last_tap_ms = timestamp
            self._pending_tap_target = note_state.note_id
            self._tap_timer.start(self._config.double_tap_ms)

    def _handle_canvas_tap(self, timestamp: float) -> None:
        if not self._canvas_tap_candidate:
            return
        last_tap = self._canvas_last_tap_ms
        if last_tap is not None and timestamp - last_tap <= self._config.double_tap_ms:
            self._canvas_last_tap_ms = None
            self._cancel_pending_tap()
            self._viewport.resetView()
        else:
            self._canvas_last_tap_ms = timestamp
            self._pending_canvas_point = self._viewport.toLogical(*self._canvas_tap_start)
            self._pending_tap_target = CANVAS_TARGET
            self._tap_timer.start(self._config.double_tap_ms)

    def _on_tap_timeout(self) -> None:
        target = self._pending_tap_target
        self._pending_tap_target = None
        if self._state == GestureState.TAP_PENDING:
            self._set_state(GestureState.IDLE)
        if target is None:
            return
        if target == CANVAS_TARGET:
            self._canvas_last_tap_ms = None
            self.canvasTapped.emit(*self._pending_canvas_point)
            return
        note_state = self._note_states.get(target)
        if note_state is not None:
            note_state.last_tap_ms = None
        if self._model.getNote(target) is not None:
            self.editorRequested.emit(target)

    def _settle_pending_tap(self, target: str) -> None:
        """A new press resolves the pending tap.

        Same target: hold the timer and wait for this press to become the
        second tap. Different target: the earlier tap was a single tap.
        """
        if self._pending_tap_target is None:
            return
        if self._pending_tap_target == target:
            self._tap_timer.cancel()
        elif not self._tap_timer.fire():
            self._pending_tap_target = None

    def _cancel_pending_tap(self) -> None:
        self._tap_timer.cancel()
        target = self._pending_tap_target
        self._pending_tap_target = None
        self._canvas_last_tap_ms = None
        if target:
            note_state = self._note_states.get(target)
            if note_state is not None:
                note_state.last_tap_ms = None

    def _reset_sequence(self) -> None:
        self._touches.clear()
        self._long_press.cancel()
        self._pinch = None
        self._pan = None
        self._active_note_id = None
        self._canvas_tap_candidate = False

    # --- Note bookkeeping -----------------------------------------------------
    def _note_state(self, note_id: str) -> NoteGestureState:
        note_state = self._note_states.get(note_id)
        if note_state is None:
            note_state = NoteGestureState(note_id=note_id)
            self._note_states[note_id] = note_state
        return note_state

    def _active_state(self) -> Optional[NoteGestureState]:
        if self._active_note_id is None:
            return None
        return self._note_states.get(self._active_note_id)

    def _forget_note(self, note_id: str) -> None:
        if note_id == self._active_note_id:
            self._abort_note_gesture()
            if self._state in (GestureState.POSSIBLE_NOTE_DRAG, GestureState.NOTE_DRAGGING):
                self._set_state(GestureState.IDLE)
        if self._pending_tap_target == note_id:
            self._cancel_pending_tap()
        self._note_states.pop(note_id, None)

    def _forget_all_notes(self) -> None:
        self._abort_note_gesture()
        if self._pending_tap_target:
            self._cancel_pending_tap()
        if self._state in (GestureState.POSSIBLE_NOTE_DRAG, GestureState.NOTE_DRAGGING):
            self._set_state(GestureState.IDLE)
        self._note_states.clear()

    # --- Helpers --------------------------------------------------------------
    def _set_state(self, state: GestureState) -> None:
        if state == self._state:
            return
        logger.debug("Gesture state %s -> %s", self._state.value, state.value)
        self._state = state
        self.stateChanged.emit()

    def _set_delta(
        self,
        note_state: NoteGestureState,
        dx: float,
        dy: float,
        force_emit: bool = False,
    ) -> None:
        changed = (note_state.delta_x, note_state.delta_y) != (dx, dy)
        note_state.delta_x = dx
        note_state.delta_y = dy
        if changed or force_emit:
            self.dragDeltaChanged.emit()

    def _beyond_threshold(self, dx: float, dy: float) -> bool:
        threshold = self._config.drag_threshold
        return dx * dx + dy * dy > threshold * threshold

    def _first_touch(self) -> Tuple[float, float]:
        return next(iter(self._touches.values()))

    def _first_two_touches(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        values = list(self._touches.values())
        return values[0], values[1]

    @staticmethod
    def _coerce(points: Iterable[Any]) -> List[TouchPoint]:
        return [TouchPoint.coerce(point) for point in points or []]
