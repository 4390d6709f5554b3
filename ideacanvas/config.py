"""Tuning values for gestures, zoom and persistence.

Values come from the defaults in :mod:`ideacanvas.constants`, then from
``QSettings`` (``canvas/<name>``), then from ``IDEACANVAS_<NAME>`` environment
variables. Unparseable overrides are ignored.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from PySide6.QtCore import QSettings

from .constants import (
    DOUBLE_TAP_DELAY_MS,
    DRAG_ACTIVATION_THRESHOLD,
    LONG_PRESS_DELAY_MS,
    MAX_CANVAS_SCALE,
    MIN_CANVAS_SCALE,
    NOTE_CARD_MIN_HEIGHT,
    NOTE_CARD_WIDTH,
    SAVE_DEBOUNCE_MS,
)

logger = logging.getLogger(__name__)

SETTINGS_ORGANIZATION = "IdeaCanvas"
SETTINGS_APPLICATION = "IdeaCanvas"
ENV_PREFIX = "IDEACANVAS_"


@dataclass(frozen=True)
class CanvasConfig:
    double_tap_ms: int = DOUBLE_TAP_DELAY_MS
    long_press_ms: int = LONG_PRESS_DELAY_MS
    drag_threshold: float = DRAG_ACTIVATION_THRESHOLD
    debounce_ms: int = SAVE_DEBOUNCE_MS
    min_scale: float = MIN_CANVAS_SCALE
    max_scale: float = MAX_CANVAS_SCALE
    note_width: float = NOTE_CARD_WIDTH
    note_height: float = NOTE_CARD_MIN_HEIGHT
    # Half-size of the pannable logical extent around the origin; None disables boundary correction.
    pan_limit: Optional[float] = None

    def __post_init__(self) -> None:
        if self.min_scale <= 0 or self.max_scale < self.min_scale:
            raise ValueError(f"Invalid scale bounds: {self.min_scale}..{self.max_scale}")

    def with_overrides(self, overrides: Mapping[str, Any]) -> "CanvasConfig":
        """Return a copy with parsed overrides applied, skipping bad values."""
        parsed: Dict[str, Any] = {}
        for entry in fields(self):
            if entry.name not in overrides:
                continue
            raw = overrides[entry.name]
            try:
                parsed[entry.name] = _parse_value(entry.name, raw)
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid canvas setting %s=%r", entry.name, raw)
        if not parsed:
            return self
        try:
            return replace(self, **parsed)
        except ValueError as exc:
            logger.warning("Ignoring canvas overrides: %s", exc)
            return self


_INT_FIELDS = {"double_tap_ms", "long_press_ms", "debounce_ms"}


def _parse_value(name: str, raw: Any) -> Any:
    if name == "pan_limit":
        if raw is None or str(raw).strip().lower() in ("", "none", "off"):
            return None
        value = float(raw)
        if value <= 0:
            raise ValueError(name)
        return value
    if name in _INT_FIELDS:
        value = int(float(raw))
    else:
        value = float(raw)
    if value < 0:
        raise ValueError(name)
    return value


def _settings_key(name: str) -> str:
    head, *rest = name.split("_")
    return "canvas/" + head + "".join(part.title() for part in rest)


def load_config(
    settings: Optional[QSettings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CanvasConfig:
    """Build the canvas configuration from settings and environment."""
    if settings is None:
        settings = QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)
    if environ is None:
        environ = os.environ

    config = CanvasConfig()
    from_settings: Dict[str, Any] = {}
    for entry in fields(config):
        key = _settings_key(entry.name)
        if settings.contains(key):
            from_settings[entry.name] = settings.value(key)
    config = config.with_overrides(from_settings)

    from_env: Dict[str, Any] = {}
    for entry in fields(config):
        env_name = ENV_PREFIX + entry.name.upper()
        if env_name in environ:
            from_env[entry.name] = environ[env_name]
    return config.with_overrides(from_env)
