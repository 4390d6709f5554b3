"""Idea notes canvas built with PySide6 and QML.

Sticky notes live in logical canvas coordinates; pan and zoom only change the
view. Touch input is classified into note drags, taps and canvas gestures,
and the note collection is written back to the idea store on a debounce.
"""

from .config import CanvasConfig, load_config
from .constants import CATEGORY_PRESETS
from .deferred import DeferredCall
from .editor import NoteEditor
from .errors import (
    IdeaNotFoundError,
    IdeaStorageError,
    NoteCanvasError,
    NoteValidationError,
    UnknownNoteError,
)
from .gestures import GestureClassifier, GestureState
from .model import NoteModel
from .qml import NOTES_CANVAS_QML
from .repository import IdeaRepository, JsonIdeaRepository
from .sync import PersistenceSynchronizer
from .transform import CanvasTransform
from .types import Note, NoteCategory, TouchPoint
from .ui import create_workspace_window, main
from .viewport import CanvasViewport
from .workspace import IdeaWorkspace

__all__ = [
    "CATEGORY_PRESETS",
    "CanvasConfig",
    "CanvasTransform",
    "CanvasViewport",
    "DeferredCall",
    "GestureClassifier",
    "GestureState",
    "IdeaNotFoundError",
    "IdeaRepository",
    "IdeaStorageError",
    "IdeaWorkspace",
    "JsonIdeaRepository",
    "NOTES_CANVAS_QML",
    "Note",
    "NoteCanvasError",
    "NoteCategory",
    "NoteEditor",
    "NoteModel",
    "NoteValidationError",
    "PersistenceSynchronizer",
    "TouchPoint",
    "UnknownNoteError",
    "create_workspace_window",
    "load_config",
    "main",
]
