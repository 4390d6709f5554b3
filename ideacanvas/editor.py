"""Add/edit form state for a single sticky note."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from PySide6.QtCore import Property, QObject, Signal, Slot

from .constants import CATEGORY_PRESETS, DEFAULT_LEVEL
from .errors import NoteCanvasError
from .model import NoteModel, parse_category
from .types import NoteCategory

logger = logging.getLogger(__name__)


class NoteEditor(QObject):
    """Form backing the note editor overlay.

    ``openNew`` starts a note at a logical position, ``openExisting`` loads a
    note for editing. Only the fields of the selected category are written
    into ``categoryData`` on save.
    """

    openChanged = Signal()
    formChanged = Signal()
    errorOccurred = Signal(str)
    noteSaved = Signal(str, arguments=["noteId"])
    noteDeleted = Signal(str, arguments=["noteId"])

    def __init__(self, model: NoteModel, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._model = model
        self._open = False
        self._note_id = ""
        self._x = 0.0
        self._y = 0.0
        self._reset_fields()
        self._model.noteRemoved.connect(self._on_note_removed)

    def _reset_fields(self) -> None:
        self._title = ""
        self._category = NoteCategory.FEATURE.value
        self._content = ""
        self._feature_priority = DEFAULT_LEVEL
        self._question_urgency = DEFAULT_LEVEL
        self._question_blocking = False
        self._question_who = ""
        self._todo_priority = DEFAULT_LEVEL

    # --- Form properties ------------------------------------------------------
    @Property(bool, notify=openChanged)
    def isOpen(self) -> bool:
        return self._open

    @Property(str, notify=openChanged)
    def noteId(self) -> str:
        return self._note_id

    @Property(bool, notify=openChanged)
    def isNew(self) -> bool:
        return self._open and not self._note_id

    def _get_title(self) -> str:
        return self._title

    def _set_title(self, value: str) -> None:
        self._assign("_title", str(value or ""))

    title = Property(str, _get_title, _set_title, notify=formChanged)

    def _get_category(self) -> str:
        return self._category

    def _set_category(self, value: str) -> None:
        self._assign("_category", str(value or ""))

    category = Property(str, _get_category, _set_category, notify=formChanged)

    def _get_content(self) -> str:
        return self._content

    def _set_content(self, value: str) -> None:
        self._assign("_content", str(value or ""))

    content = Property(str, _get_content, _set_content, notify=formChanged)

    def _get_feature_priority(self) -> str:
        return self._feature_priority

    def _set_feature_priority(self, value: str) -> None:
        self._assign("_feature_priority", str(value))

    featurePriority = Property(str, _get_feature_priority, _set_feature_priority, notify=formChanged)

    def _get_question_urgency(self) -> str:
        return self._question_urgency

    def _set_question_urgency(self, value: str) -> None:
        self._assign("_question_urgency", str(value))

    questionUrgency = Property(str, _get_question_urgency, _set_question_urgency, notify=formChanged)

    def _get_question_blocking(self) -> bool:
        return self._question_blocking

    def _set_question_blocking(self, value: bool) -> None:
        self._assign("_question_blocking", bool(value))

    questionBlocking = Property(bool, _get_question_blocking, _set_question_blocking, notify=formChanged)

    def _get_question_who(self) -> str:
        return self._question_who

    def _set_question_who(self, value: str) -> None:
        self._assign("_question_who", str(value or ""))

    questionWhoToAsk = Property(str, _get_question_who, _set_question_who, notify=formChanged)

    def _get_todo_priority(self) -> str:
        return self._todo_priority

    def _set_todo_priority(self, value: str) -> None:
        self._assign("_todo_priority", str(value))

    todoPriority = Property(str, _get_todo_priority, _set_todo_priority, notify=formChanged)

    @Slot(result="QVariantList")
    def categoryOptions(self) -> list:
        return [
            {"value": category.value, "label": preset["label"], "color": preset["color"]}
            for category, preset in CATEGORY_PRESETS.items()
        ]

    # --- Session --------------------------------------------------------------
    @Slot(float, float)
    def openNew(self, x: float, y: float) -> None:
        """Start a new note that will be placed at logical ``(x, y)``."""
        self._reset_fields()
        self._note_id = ""
        self._x = float(x)
        self._y = float(y)
        self._set_open(True)
        self.formChanged.emit()

    @Slot(str, result=bool)
    def openExisting(self, note_id: str) -> bool:
        note = self._model.getNote(note_id)
        if note is None:
            self.errorOccurred.emit(f"Note not found: {note_id}")
            return False

        data = note.category_data
        self._reset_fields()
        self._note_id = note.id
        self._x = note.x
        self._y = note.y
        self._title = note.title
        self._category = note.category.value
        self._content = note.content
        if note.category == NoteCategory.FEATURE:
            self._feature_priority = data.get("priority", DEFAULT_LEVEL)
        elif note.category == NoteCategory.QUESTION:
            self._question_urgency = data.get("urgency", DEFAULT_LEVEL)
            self._question_blocking = bool(data.get("blocking", False))
            self._question_who = data.get("whoToAsk", "")
        elif note.category == NoteCategory.TODO:
            self._todo_priority = data.get("priority", DEFAULT_LEVEL)
        self._set_open(True)
        self.formChanged.emit()
        return True

    def build_category_data(self) -> Dict[str, Any]:
        category = parse_category(self._category)
        if category == NoteCategory.FEATURE:
            return {"priority": self._feature_priority}
        if category == NoteCategory.QUESTION:
            return {
                "urgency": self._question_urgency,
                "blocking": self._question_blocking,
                "whoToAsk": self._question_who,
            }
        if category == NoteCategory.TODO:
            return {"priority": self._todo_priority}
        return {}

    @Slot(result=bool)
    def save(self) -> bool:
        """Validate and write the form to the model; the form stays open on failure."""
        if not self._open:
            return False
        try:
            category_data = self.build_category_data()
            if self._note_id:
                note = self._model.updateNote(self._note_id, {
                    "title": self._title,
                    "category": self._category,
                    "content": self._content,
                    "categoryData": category_data,
                })
            else:
                note = self._model.createNote(
                    self._title,
                    self._category,
                    self._x,
                    self._y,
                    content=self._content,
                    category_data=category_data,
                )
        except NoteCanvasError as exc:
            logger.info("Note not saved: %s", exc)
            self.errorOccurred.emit(str(exc))
            return False

        self._close()
        self.noteSaved.emit(note.id)
        return True

    @Slot()
    def cancel(self) -> None:
        self._close()

    @Slot(result=bool)
    def deleteNote(self) -> bool:
        if not self._open or not self._note_id:
            return False
        note_id = self._note_id
        try:
            self._model.removeNote(note_id)
        except NoteCanvasError as exc:
            self.errorOccurred.emit(str(exc))
            return False
        self._close()
        self.noteDeleted.emit(note_id)
        return True

    # --- Helpers --------------------------------------------------------------
    def _close(self) -> None:
        self._reset_fields()
        self._note_id = ""
        self._set_open(False)
        self.formChanged.emit()

    def _set_open(self, value: bool) -> None:
        self._open = value
        self.openChanged.emit()

    def _assign(self, attribute: str, value: Any) -> None:
        if getattr(self, attribute) == value:
            return
        setattr(self, attribute, value)
        self.formChanged.emit()

    def _on_note_removed(self, note_id: str) -> None:
        if self._open and note_id == self._note_id:
            self._close()
