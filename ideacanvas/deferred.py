"""Cancellable single-shot callbacks on the Qt event loop."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class DeferredCall(QObject):
    """One timer slot: starting it again replaces the pending deadline.

    ``fire()`` runs a pending callback right away, which is also how tests
    step through time without spinning the event loop.
    """

    def __init__(self, callback: Callable[[], None], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._callback = callback
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)

    def start(self, delay_ms: float) -> None:
        self._timer.start(max(0, int(delay_ms)))

    def cancel(self) -> None:
        self._timer.stop()

    def isPending(self) -> bool:
        return self._timer.isActive()

    def delay(self) -> int:
        """Interval of the current (or last) arming, in milliseconds."""
        return self._timer.interval()

    def fire(self) -> bool:
        """Run the callback now if armed; returns whether it ran."""
        if not self._timer.isActive():
            return False
        self._timer.stop()
        self._callback()
        return True

    def _on_timeout(self) -> None:
        self._callback()
