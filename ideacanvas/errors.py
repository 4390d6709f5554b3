"""Exception types raised by the notes canvas."""

from __future__ import annotations


class NoteCanvasError(Exception):
    """Base class for notes canvas failures."""


class NoteValidationError(NoteCanvasError, ValueError):
    """Raised when note fields fail validation before any mutation."""


class UnknownNoteError(NoteCanvasError, KeyError):
    """Raised when a note id is not present in the model."""

    def __init__(self, note_id: str) -> None:
        super().__init__(note_id)
        self.note_id = note_id

    def __str__(self) -> str:
        return f"Unknown note: {self.note_id}"


class IdeaNotFoundError(NoteCanvasError, LookupError):
    """Raised when the owning idea does not exist."""


class IdeaStorageError(NoteCanvasError):
    """Raised when the idea store cannot be read or written."""
