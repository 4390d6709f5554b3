"""Controller that opens an idea on the notes canvas."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Property, QObject, Signal, Slot

from .config import CanvasConfig
from .editor import NoteEditor
from .errors import IdeaNotFoundError, NoteCanvasError
from .gestures import GestureClassifier
from .model import NoteModel
from .repository import IdeaRepository
from .sync import PersistenceSynchronizer
from .viewport import CanvasViewport

logger = logging.getLogger(__name__)


class IdeaWorkspace(QObject):
    """Owns the canvas objects for one open idea.

    Opening an idea saves what is left unsaved of the previous one, then
    replaces the model contents without writing them back, resets the view
    and only then attaches the synchronizer.
    """

    errorOccurred = Signal(str)  # Emitted with a user-facing message
    closeRequested = Signal()
    ideaLoaded = Signal(str, arguments=["ideaId"])
    ideaChanged = Signal()

    def __init__(
        self,
        repository: IdeaRepository,
        config: Optional[CanvasConfig] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._config = config or CanvasConfig()
        self._repository = repository
        self._idea_id = ""
        self._idea_title = ""

        self.model = NoteModel(
            note_width=self._config.note_width,
            note_height=self._config.note_height,
        )
        self.viewport = CanvasViewport(
            min_scale=self._config.min_scale,
            max_scale=self._config.max_scale,
            pan_limit=self._config.pan_limit,
            parent=self,
        )
        self.gestures = GestureClassifier(self.model, self.viewport, self._config, parent=self)
        self.sync = PersistenceSynchronizer(
            self.model, repository, debounce_ms=self._config.debounce_ms, parent=self
        )
        self.editor = NoteEditor(self.model, parent=self)

        self.gestures.editorRequested.connect(self.editor.openExisting)
        self.gestures.canvasTapped.connect(self.editor.openNew)
        self.editor.errorOccurred.connect(self.errorOccurred)

    @property
    def config(self) -> CanvasConfig:
        return self._config

    @Property(str, notify=ideaChanged)
    def ideaId(self) -> str:
        return self._idea_id

    @Property(str, notify=ideaChanged)
    def ideaTitle(self) -> str:
        return self._idea_title

    @Slot(str, result=bool)
    def openIdea(self, idea_id: str) -> bool:
        """Load ``idea_id`` into the canvas. On failure, report and ask to close."""
        idea_id = (idea_id or "").strip()
        if not idea_id:
            self._fail("No idea ID provided")
            return False

        try:
            idea = self._repository.get_idea(idea_id)
        except IdeaNotFoundError:
            logger.error("Idea %s not found", idea_id)
            self._fail("Idea not found")
            return False
        except (NoteCanvasError, OSError):
            logger.exception("Failed to load idea %s", idea_id)
            self._fail("Failed to load idea")
            return False

        notes = idea.get("notes") or []
        if not isinstance(notes, list):
            logger.warning("Idea %s has malformed notes; starting empty", idea_id)
            notes = []

        self.gestures.touchCancelled()
        self.editor.cancel()
        if self.sync.idea_id is not None:
            self.sync.flushPending()
        self.sync.detach()
        self.model.from_list(notes)
        self.viewport.resetView()
        self.sync.attach(idea_id)

        self._idea_id = idea_id
        self._idea_title = str(idea.get("title") or "")
        self.ideaChanged.emit()
        logger.info("Opened idea %s with %d notes", idea_id, self.model.count)
        self.ideaLoaded.emit(idea_id)
        return True

    def new_note_position(self):
        """Logical point that centers a new note card in the viewport."""
        center_x = self.viewport.width / 2 - self._config.note_width / 2
        center_y = self.viewport.height / 2 - self._config.note_height / 2
        return self.viewport.toLogical(center_x, center_y)

    @Slot()
    def requestNewNote(self) -> None:
        x, y = self.new_note_position()
        self.editor.openNew(x, y)

    @Slot(result=bool)
    def close(self) -> bool:
        """Flush unsaved notes right away and ask the navigator to leave."""
        self.gestures.touchCancelled()
        saved = self.sync.flushPending()
        if not saved:
            logger.warning("Closing idea %s with unsaved notes", self._idea_id)
        self.closeRequested.emit()
        return saved

    def _fail(self, message: str) -> None:
        self.errorOccurred.emit(message)
        self.closeRequested.emit()
