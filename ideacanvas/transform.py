"""Coordinate math between screen space and logical canvas space.

A screen point ``s`` and a logical point ``l`` are related by
``s = l * scale + offset``. Everything here is pure; :class:`CanvasTransform`
only carries the three numbers and keeps ``scale`` inside its bounds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]


def clamp(value: float, minimum: float, maximum: float) -> float:
    return min(max(value, minimum), maximum)


def to_logical(screen: Point, offset: Point, scale: float) -> Point:
    """Project a screen point into logical canvas space."""
    return ((screen[0] - offset[0]) / scale, (screen[1] - offset[1]) / scale)


def to_screen(logical: Point, offset: Point, scale: float) -> Point:
    """Project a logical canvas point onto the screen."""
    return (logical[0] * scale + offset[0], logical[1] * scale + offset[1])


def zoom_around(focal: Point, old_scale: float, new_scale: float, old_offset: Point) -> Point:
    """Return the offset that keeps ``focal`` over the same logical point."""
    anchor = to_logical(focal, old_offset, old_scale)
    return (focal[0] - new_scale * anchor[0], focal[1] - new_scale * anchor[1])


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def midpoint(a: Point, b: Point) -> Point:
    return ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)


def screen_delta_to_logical(dx: float, dy: float, scale: float) -> Point:
    """Convert a drag delta measured in pixels into logical units."""
    if scale <= 0:
        scale = 1.0
    return (dx / scale, dy / scale)


def clamp_offset(
    offset: Point,
    scale: float,
    viewport: Point,
    limit: float,
) -> Point:
    """Pull ``offset`` back so the viewport stays inside ``[-limit, limit]`` logically.

    When the extent is smaller than the viewport on an axis, the extent is
    centered on that axis instead.
    """
    result = []
    for axis in range(2):
        extent = 2.0 * limit * scale
        size = viewport[axis]
        low_edge = -limit * scale
        if extent <= size:
            result.append((size - extent) / 2.0 - low_edge)
            continue
        # offset must satisfy: -limit*scale + offset <= 0 and limit*scale + offset >= size
        min_offset = size - limit * scale
        max_offset = limit * scale
        result.append(clamp(offset[axis], min_offset, max_offset))
    return (result[0], result[1])


@dataclass
class CanvasTransform:
    """Pan offset (screen pixels) and zoom factor of the canvas."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0
    min_scale: float = 0.7
    max_scale: float = 2.2

    def __post_init__(self) -> None:
        self.scale = self.clamp_scale(self.scale)

    @property
    def offset(self) -> Point:
        return (self.offset_x, self.offset_y)

    def clamp_scale(self, value: float) -> float:
        return clamp(value, self.min_scale, self.max_scale)

    def to_logical(self, x: float, y: float) -> Point:
        return to_logical((x, y), self.offset, self.scale)

    def to_screen(self, x: float, y: float) -> Point:
        return to_screen((x, y), self.offset, self.scale)

    def zoom_to(self, requested_scale: float, focal_x: float, focal_y: float) -> None:
        """Change scale while keeping the focal screen point fixed."""
        new_scale = self.clamp_scale(requested_scale)
        self.offset_x, self.offset_y = zoom_around(
            (focal_x, focal_y), self.scale, new_scale, self.offset
        )
        self.scale = new_scale

    def pan_by(self, dx: float, dy: float) -> None:
        self.offset_x += dx
        self.offset_y += dy

    def reset(self) -> None:
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.scale = self.clamp_scale(1.0)

    def visible_rect(self, width: float, height: float) -> Tuple[float, float, float, float]:
        """Return ``(x, y, width, height)`` of the viewport in logical space."""
        left, top = self.to_logical(0.0, 0.0)
        return (left, top, width / self.scale, height / self.scale)
