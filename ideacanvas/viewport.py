"""Qt wrapper exposing the canvas transform to QML."""

from __future__ import annotations

from typing import Optional, Tuple

from PySide6.QtCore import Property, QObject, Signal, Slot

from .transform import CanvasTransform, clamp_offset


class CanvasViewport(QObject):
    """Current pan/zoom of the notes canvas.

    State is plain numbers updated synchronously by the gesture classifier;
    QML only reads it (and may animate between values).
    """

    transformChanged = Signal()
    viewportSizeChanged = Signal()
    resetRequested = Signal()

    def __init__(
        self,
        min_scale: float = 0.7,
        max_scale: float = 2.2,
        pan_limit: Optional[float] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._transform = CanvasTransform(min_scale=min_scale, max_scale=max_scale)
        self._width = 0.0
        self._height = 0.0
        self._pan_limit = pan_limit

    @property
    def transform(self) -> CanvasTransform:
        return self._transform

    # --- Properties exposed to QML -----------------------------------------
    @Property(float, notify=transformChanged)
    def scale(self) -> float:
        return self._transform.scale

    @Property(float, notify=transformChanged)
    def offsetX(self) -> float:
        return self._transform.offset_x

    @Property(float, notify=transformChanged)
    def offsetY(self) -> float:
        return self._transform.offset_y

    @Property(float, constant=True)
    def minScale(self) -> float:
        return self._transform.min_scale

    @Property(float, constant=True)
    def maxScale(self) -> float:
        return self._transform.max_scale

    @Property(float, notify=viewportSizeChanged)
    def width(self) -> float:
        return self._width

    @Property(float, notify=viewportSizeChanged)
    def height(self) -> float:
        return self._height

    # --- Mutation -------------------------------------------------------------
    @Slot(float, float)
    def setViewportSize(self, width: float, height: float) -> None:
        if (width, height) == (self._width, self._height):
            return
        self._width = float(width)
        self._height = float(height)
        self.viewportSizeChanged.emit()

    def setTransform(self, scale: float, offset_x: float, offset_y: float) -> None:
        transform = self._transform
        transform.scale = transform.clamp_scale(scale)
        transform.offset_x = float(offset_x)
        transform.offset_y = float(offset_y)
        self.transformChanged.emit()

    @Slot(float, float, float)
    def zoomBy(self, factor: float, focal_x: float, focal_y: float) -> None:
        """Multiply the scale around a screen point (mouse wheel, buttons)."""
        if factor <= 0:
            return
        self._transform.zoom_to(self._transform.scale * factor, focal_x, focal_y)
        self.transformChanged.emit()

    @Slot(float, float)
    def panBy(self, dx: float, dy: float) -> None:
        self._transform.pan_by(dx, dy)
        self.transformChanged.emit()

    @Slot()
    def resetView(self) -> None:
        self._transform.reset()
        self.resetRequested.emit()
        self.transformChanged.emit()

    def applyBoundaryCorrection(self) -> bool:
        """Clamp the offset back into the pannable extent; True if it moved."""
        if self._pan_limit is None or self._width <= 0 or self._height <= 0:
            return False
        transform = self._transform
        corrected = clamp_offset(
            transform.offset,
            transform.scale,
            (self._width, self._height),
            self._pan_limit,
        )
        if corrected == transform.offset:
            return False
        transform.offset_x, transform.offset_y = corrected
        self.transformChanged.emit()
        return True

    # --- Queries --------------------------------------------------------------
    def toLogical(self, x: float, y: float) -> Tuple[float, float]:
        return self._transform.to_logical(x, y)

    def toScreen(self, x: float, y: float) -> Tuple[float, float]:
        return self._transform.to_screen(x, y)

    @Slot(result="QVariant")
    def visibleLogicalRect(self) -> dict:
        x, y, width, height = self._transform.visible_rect(self._width, self._height)
        return {"x": x, "y": y, "width": width, "height": height}
