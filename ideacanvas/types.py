"""Data types for the idea notes canvas.

This module contains the core data structures shared by the note model,
the gesture classifier and the persistence layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class NoteCategory(Enum):
    """Supported sticky-note categories."""

    FEATURE = "feature"
    QUESTION = "question"
    TODO = "todo"
    RISK = "risk"
    INSIGHT = "insight"


@dataclass
class Note:
    """A sticky note positioned in logical canvas space."""

    id: str
    title: str
    category: NoteCategory
    x: float
    y: float
    content: str = ""
    category_data: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        """Return the note in the shape stored on the idea document."""
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "content": self.content,
            "position": {"x": self.x, "y": self.y},
            "categoryData": dict(self.category_data),
        }


@dataclass
class TouchPoint:
    """A single active finger in screen coordinates."""

    id: int
    x: float
    y: float

    @classmethod
    def coerce(cls, value: Any) -> "TouchPoint":
        """Accept TouchPoint instances or dicts coming from QML."""
        if isinstance(value, TouchPoint):
            return value
        if isinstance(value, Mapping):
            point_id = value.get("id", value.get("pointId", 0))
            return cls(int(point_id), float(value.get("x", 0.0)), float(value.get("y", 0.0)))
        raise TypeError(f"Unsupported touch point: {value!r}")


@dataclass
class PinchBaseline:
    """Transform snapshot taken when a two-finger gesture starts."""

    distance: float
    mid_x: float
    mid_y: float
    scale: float
    offset_x: float
    offset_y: float


@dataclass
class PanBaseline:
    """Anchor for a one-finger continuation of a canvas gesture."""

    finger_id: int
    start_x: float
    start_y: float
    offset_x: float
    offset_y: float


@dataclass
class NoteGestureState:
    """Gesture bookkeeping for one note, looked up by note id."""

    note_id: str
    start_x: float = 0.0
    start_y: float = 0.0
    delta_x: float = 0.0
    delta_y: float = 0.0
    dragging: bool = False
    last_tap_ms: Optional[float] = None
