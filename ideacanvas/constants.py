"""Constants and presets for the notes canvas."""

from typing import Any, Dict, Tuple

from .types import NoteCategory


DOUBLE_TAP_DELAY_MS = 220
LONG_PRESS_DELAY_MS = 250
DRAG_ACTIVATION_THRESHOLD = 8.0
SAVE_DEBOUNCE_MS = 500

MIN_CANVAS_SCALE = 0.7
MAX_CANVAS_SCALE = 2.2

NOTE_CARD_WIDTH = 200.0
NOTE_CARD_MIN_HEIGHT = 140.0

DEFAULT_LEVEL = "medium"

FEATURE_PRIORITIES: Tuple[str, ...] = ("low", "medium", "high", "critical")
QUESTION_URGENCIES: Tuple[str, ...] = ("low", "medium", "high")
TODO_PRIORITIES: Tuple[str, ...] = ("low", "medium", "high")


CATEGORY_PRESETS: Dict[NoteCategory, Dict[str, Any]] = {
    NoteCategory.FEATURE: {
        "label": "Feature",
        "color": "#4A9EFF",
        "fields": {"priority": FEATURE_PRIORITIES},
    },
    NoteCategory.QUESTION: {
        "label": "Question",
        "color": "#FFD93D",
        "fields": {"urgency": QUESTION_URGENCIES, "blocking": bool, "whoToAsk": str},
    },
    NoteCategory.TODO: {
        "label": "To-Do",
        "color": "#A78BFA",
        "fields": {"priority": TODO_PRIORITIES},
    },
    NoteCategory.RISK: {
        "label": "Risk",
        "color": "#FF6B6B",
        "fields": {},
    },
    NoteCategory.INSIGHT: {
        "label": "Insight",
        "color": "#4ECDC4",
        "fields": {},
    },
}
