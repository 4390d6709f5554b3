"""Core NoteModel class for the idea notes canvas.

This module provides the Qt list model that owns the in-memory working copy
of an idea's sticky notes.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional

from PySide6.QtCore import (
    QAbstractListModel,
    QModelIndex,
    Property,
    Qt,
    Signal,
    Slot,
)

from .constants import CATEGORY_PRESETS, NOTE_CARD_MIN_HEIGHT, NOTE_CARD_WIDTH
from .errors import NoteValidationError, UnknownNoteError
from .types import Note, NoteCategory

EDITABLE_FIELDS = ("title", "category", "content", "x", "y", "position", "categoryData")


def parse_category(value: Any) -> NoteCategory:
    if isinstance(value, NoteCategory):
        return value
    try:
        return NoteCategory(str(value).strip().lower())
    except ValueError:
        raise NoteValidationError(f"Unknown note category: {value!r}") from None


def clean_title(title: Any) -> str:
    text = str(title or "").strip()
    if not text:
        raise NoteValidationError("Please enter a note title")
    return text


def validate_category_data(category: NoteCategory, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Check the fields that belong to ``category``; other keys pass through."""
    rules = CATEGORY_PRESETS[category]["fields"]
    checked: Dict[str, Any] = {}
    for key, value in data.items():
        allowed = rules.get(key)
        if allowed is None:
            checked[key] = value
        elif allowed is bool:
            checked[key] = bool(value)
        elif allowed is str:
            checked[key] = str(value or "")
        elif value not in allowed:
            raise NoteValidationError(
                f"Invalid {key} for {category.value}: {value!r} (expected one of {', '.join(allowed)})"
            )
        else:
            checked[key] = value
    return checked


class NoteModel(QAbstractListModel):
    """Qt model exposing canvas notes to QML."""

    IdRole = Qt.UserRole + 1
    TitleRole = Qt.UserRole + 2
    CategoryRole = Qt.UserRole + 3
    CategoryLabelRole = Qt.UserRole + 4
    ColorRole = Qt.UserRole + 5
    ContentRole = Qt.UserRole + 6
    XRole = Qt.UserRole + 7
    YRole = Qt.UserRole + 8
    CategoryDataRole = Qt.UserRole + 9
    DraggingRole = Qt.UserRole + 10

    notesChanged = Signal()
    noteRemoved = Signal(str, arguments=["noteId"])
    draggingNoteIdChanged = Signal()
    dragCommitted = Signal(str, arguments=["noteId"])

    def __init__(
        self,
        note_width: float = NOTE_CARD_WIDTH,
        note_height: float = NOTE_CARD_MIN_HEIGHT,
    ):
        super().__init__()
        self._notes: List[Note] = []
        self._dragging_id: Optional[str] = None
        self._note_width = float(note_width)
        self._note_height = float(note_height)

    def _next_id(self) -> str:
        return f"note_{uuid.uuid4().hex}"

    def _row_of(self, note_id: str) -> int:
        for row, note in enumerate(self._notes):
            if note.id == note_id:
                return row
        raise UnknownNoteError(note_id)

    def _emit_row_changed(self, row: int, roles: List[int]) -> None:
        index = self.index(row, 0)
        self.dataChanged.emit(index, index, roles)
        self.notesChanged.emit()

    # --- Qt model overrides -------------------------------------------------
    def rowCount(self, parent: QModelIndex | None = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._notes)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._notes)):
            return None

        note = self._notes[index.row()]
        if role == self.IdRole:
            return note.id
        if role in (self.TitleRole, Qt.DisplayRole):
            return note.title
        if role == self.CategoryRole:
            return note.category.value
        if role == self.CategoryLabelRole:
            return CATEGORY_PRESETS[note.category]["label"]
        if role == self.ColorRole:
            return CATEGORY_PRESETS[note.category]["color"]
        if role == self.ContentRole:
            return note.content
        if role == self.XRole:
            return note.x
        if role == self.YRole:
            return note.y
        if role == self.CategoryDataRole:
            return dict(note.category_data)
        if role == self.DraggingRole:
            return note.id == self._dragging_id
        return None

    def roleNames(self) -> Dict[int, bytes]:  # type: ignore[override]
        return {
            self.IdRole: b"noteId",
            self.TitleRole: b"title",
            self.CategoryRole: b"category",
            self.CategoryLabelRole: b"categoryLabel",
            self.ColorRole: b"color",
            self.ContentRole: b"content",
            self.XRole: b"noteX",
            self.YRole: b"noteY",
            self.CategoryDataRole: b"categoryData",
            self.DraggingRole: b"dragging",
        }

    # --- Properties exposed to QML -----------------------------------------
    @Property(int, notify=notesChanged)
    def count(self) -> int:
        return len(self._notes)

    @Property(str, notify=draggingNoteIdChanged)
    def draggingNoteId(self) -> str:
        return self._dragging_id or ""

    @Property(float, constant=True)
    def noteWidth(self) -> float:
        return self._note_width

    @Property(float, constant=True)
    def noteHeight(self) -> float:
        return self._note_height

    # --- Note management ----------------------------------------------------
    def createNote(
        self,
        title: str,
        category: Any,
        x: float,
        y: float,
        content: str = "",
        category_data: Optional[Mapping[str, Any]] = None,
    ) -> Note:
        """Append a note at logical ``(x, y)``.

        Raises:
            NoteValidationError: title is blank, or category/fields are invalid.
        """
        note_title = clean_title(title)
        note_category = parse_category(category)
        data = validate_category_data(note_category, category_data or {})
        note = Note(
            id=self._next_id(),
            title=note_title,
            category=note_category,
            x=float(x),
            y=float(y),
            content=str(content or ""),
            category_data=data,
        )
        self.beginInsertRows(QModelIndex(), len(self._notes), len(self._notes))
        self._notes.append(note)
        self.endInsertRows()
        self.notesChanged.emit()
        return note

    def updateNote(self, note_id: str, fields: Mapping[str, Any]) -> Note:
        """Merge ``fields`` into a note in place.

        ``categoryData`` is merged key by key so fields of other categories
        survive a category switch.
        """
        row = self._row_of(note_id)
        note = self._notes[row]
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise NoteValidationError(f"Unknown note fields: {', '.join(sorted(unknown))}")

        title = clean_title(fields["title"]) if "title" in fields else note.title
        category = parse_category(fields["category"]) if "category" in fields else note.category
        content = str(fields.get("content", note.content) or "")
        x, y = note.x, note.y
        try:
            if "position" in fields:
                position = fields["position"] or {}
                x = float(position.get("x", x))
                y = float(position.get("y", y))
            x = float(fields.get("x", x))
            y = float(fields.get("y", y))
        except (AttributeError, TypeError, ValueError):
            raise NoteValidationError(f"Invalid position for note {note_id}") from None
        category_data = dict(note.category_data)
        if "categoryData" in fields:
            category_data.update(validate_category_data(category, fields["categoryData"] or {}))

        note.title = title
        note.category = category
        note.content = content
        note.x = x
        note.y = y
        note.category_data = category_data
        self._emit_row_changed(row, list(self.roleNames().keys()))
        return note

    @Slot(str, float, float)
    def updateNotePosition(self, note_id: str, x: float, y: float) -> None:
        row = self._row_of(note_id)
        note = self._notes[row]
        if note.x == x and note.y == y:
            return
        note.x = float(x)
        note.y = float(y)
        self._emit_row_changed(row, [self.XRole, self.YRole])

    def removeNote(self, note_id: str) -> None:
        row = self._row_of(note_id)
        if note_id == self._dragging_id:
            self._set_dragging(None)
        self.beginRemoveRows(QModelIndex(), row, row)
        del self._notes[row]
        self.endRemoveRows()
        self.noteRemoved.emit(note_id)
        self.notesChanged.emit()

    def getNote(self, note_id: str) -> Optional[Note]:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def allNotes(self) -> List[Note]:
        """Notes in insertion order."""
        return list(self._notes)

    @Slot(str, result="QVariant")
    def getNoteSnapshot(self, note_id: str) -> Dict[str, Any]:
        note = self.getNote(note_id)
        return note.to_record() if note else {}

    # --- Hit testing ----------------------------------------------------------
    def _contains(self, note: Note, x: float, y: float, margin: float = 0.0) -> bool:
        return (
            note.x - margin <= x <= note.x + self._note_width + margin
            and note.y - margin <= y <= note.y + self._note_height + margin
        )

    @Slot(float, float, result=str)
    def noteIdAt(self, x: float, y: float) -> str:
        """Topmost note under logical ``(x, y)``, or an empty string."""
        for note in reversed(self._notes):
            if self._contains(note, x, y):
                return note.id
        return ""

    @Slot(float, float, float, float, result=list)
    def noteIdsInRect(self, x: float, y: float, width: float, height: float) -> List[str]:
        """Ids of notes overlapping a logical rectangle, for viewport culling."""
        right = x + width
        bottom = y + height
        return [
            note.id
            for note in self._notes
            if note.x <= right
            and note.x + self._note_width >= x
            and note.y <= bottom
            and note.y + self._note_height >= y
        ]

    # --- Drag lifecycle -----------------------------------------------------
    def _set_dragging(self, note_id: Optional[str]) -> None:
        if note_id == self._dragging_id:
            return
        previous = self._dragging_id
        self._dragging_id = note_id
        for changed in (previous, note_id):
            if changed is None:
                continue
            try:
                row = self._row_of(changed)
            except UnknownNoteError:
                continue
            index = self.index(row, 0)
            self.dataChanged.emit(index, index, [self.DraggingRole])
        self.draggingNoteIdChanged.emit()

    def beginDrag(self, note_id: str) -> None:
        self._row_of(note_id)
        self._set_dragging(note_id)

    def commitDrag(self, note_id: str, dx: float, dy: float) -> None:
        """Apply a logical drag delta and end the drag.

        The position lands in the model before the drag flag clears, so
        observers of ``dragCommitted`` always see the committed position.
        """
        try:
            note = self._notes[self._row_of(note_id)]
            if dx or dy:
                self.updateNotePosition(note_id, note.x + dx, note.y + dy)
        finally:
            self._set_dragging(None)
        self.dragCommitted.emit(note_id)

    def cancelDrag(self) -> None:
        self._set_dragging(None)

    # --- Serialization --------------------------------------------------------
    def to_list(self) -> List[Dict[str, Any]]:
        """Serialize notes in the shape stored on the idea document."""
        return [note.to_record() for note in self._notes]

    def from_list(self, records: Iterable[Mapping[str, Any]]) -> None:
        """Replace all notes with ``records`` loaded from storage."""
        new_notes: List[Note] = []
        seen = set()
        for record in records or []:
            if not isinstance(record, Mapping):
                continue
            note_id = str(record.get("id") or "")
            if not note_id or note_id in seen:
                continue
            seen.add(note_id)
            try:
                category = parse_category(record.get("category", "feature"))
            except NoteValidationError:
                category = NoteCategory.FEATURE
            position = record.get("position")
            if not isinstance(position, Mapping):
                position = {}
            try:
                x = float(position.get("x", 0.0))
                y = float(position.get("y", 0.0))
            except (TypeError, ValueError):
                x = y = 0.0
            category_data = record.get("categoryData") or {}
            new_notes.append(Note(
                id=note_id,
                title=str(record.get("title", "")),
                category=category,
                x=x,
                y=y,
                content=str(record.get("content", "") or ""),
                category_data=dict(category_data) if isinstance(category_data, Mapping) else {},
            ))

        self.beginResetModel()
        self._notes = new_notes
        self._dragging_id = None
        self.endResetModel()
        self.draggingNoteIdChanged.emit()
        self.notesChanged.emit()
