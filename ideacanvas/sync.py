"""Debounced persistence of the note collection.

Flush policy:

* every note mutation re-arms one deferred flush ``debounce_ms`` out;
* nothing is flushed while a note is being dragged;
* the flush after a drag release is armed with zero delay, and later
  mutations do not push it back;
* a flush always writes the whole collection in one ``update_idea`` call;
* a failed flush is logged and the collection stays dirty until the next
  mutation re-arms the timer. There is no retry timer.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Property, QObject, Signal, Slot

from .constants import SAVE_DEBOUNCE_MS
from .deferred import DeferredCall
from .model import NoteModel
from .repository import IdeaRepository

logger = logging.getLogger(__name__)


class PersistenceSynchronizer(QObject):
    """Keep an idea's stored notes in step with a :class:`NoteModel`."""

    flushed = Signal(str, arguments=["ideaId"])
    flushFailed = Signal(str, str, arguments=["ideaId", "message"])
    dirtyChanged = Signal()

    def __init__(
        self,
        model: NoteModel,
        repository: IdeaRepository,
        debounce_ms: int = SAVE_DEBOUNCE_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._model = model
        self._repository = repository
        self._debounce_ms = int(debounce_ms)
        self._idea_id: Optional[str] = None
        self._dirty = False
        self._immediate = False
        self._task = DeferredCall(self.flush, self)

        self._model.notesChanged.connect(self._on_notes_changed)
        self._model.draggingNoteIdChanged.connect(self._on_dragging_changed)
        self._model.dragCommitted.connect(self._on_drag_committed)

    # --- Attachment -----------------------------------------------------------
    def attach(self, idea_id: str) -> None:
        """Start syncing for ``idea_id``; the current notes count as saved."""
        self._task.cancel()
        self._idea_id = idea_id
        self._immediate = False
        self._set_dirty(False)

    def detach(self) -> None:
        self._task.cancel()
        self._idea_id = None
        self._immediate = False
        self._set_dirty(False)

    @property
    def idea_id(self) -> Optional[str]:
        return self._idea_id

    @Property(bool, notify=dirtyChanged)
    def dirty(self) -> bool:
        return self._dirty

    def isFlushPending(self) -> bool:
        return self._task.isPending()

    def pendingDelay(self) -> Optional[int]:
        """Delay of the armed flush in ms, or None when nothing is armed."""
        return self._task.delay() if self._task.isPending() else None

    # --- Model observers ------------------------------------------------------
    def _on_notes_changed(self) -> None:
        if self._idea_id is None:
            return
        self._set_dirty(True)
        if self._model.draggingNoteId:
            self._task.cancel()
            return
        if self._immediate and self._task.isPending():
            return
        self._immediate = False
        self._task.start(self._debounce_ms)

    def _on_dragging_changed(self) -> None:
        if self._idea_id is None:
            return
        if self._model.draggingNoteId:
            self._immediate = False
            self._task.cancel()
        elif self._dirty and not self._task.isPending():
            self._task.start(self._debounce_ms)

    def _on_drag_committed(self, note_id: str) -> None:
        if self._idea_id is None or not self._dirty:
            return
        logger.debug("Drag on %s released; flushing without delay", note_id)
        self._immediate = True
        self._task.start(0)

    # --- Flushing -------------------------------------------------------------
    @Slot()
    def flush(self) -> bool:
        """Write the whole note collection now. Returns True on success."""
        self._task.cancel()
        self._immediate = False
        idea_id = self._idea_id
        if idea_id is None:
            return False
        if self._model.draggingNoteId:
            return False

        notes = self._model.to_list()
        try:
            self._repository.update_idea(idea_id, {"notes": notes})
        except Exception as exc:
            logger.warning("Failed to save notes for idea %s: %s", idea_id, exc, exc_info=True)
            self.flushFailed.emit(idea_id, str(exc))
            return False

        logger.debug("Saved %d notes for idea %s", len(notes), idea_id)
        self._set_dirty(False)
        self.flushed.emit(idea_id)
        return True

    def flushPending(self) -> bool:
        """Flush right away if anything is unsaved (used when the workspace closes)."""
        if not self._dirty:
            self._task.cancel()
            return True
        return self.flush()

    def _set_dirty(self, value: bool) -> None:
        if self._dirty != value:
            self._dirty = value
            self.dirtyChanged.emit()
