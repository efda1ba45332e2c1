"""
Frame scheduling for editor playback.

Playback is driven by the host's per-frame callback. The editor only needs
to request the next frame and to cancel a pending one; QtFrameScheduler
provides that on top of a single-shot QTimer.
"""

import logging
from typing import Callable, Optional, Protocol

from PySide6.QtCore import QObject, QTimer

FrameCallback = Callable[[], None]


class FrameScheduler(Protocol):
    """Schedules at most one pending frame callback."""

    def request_frame(self, callback: FrameCallback) -> None:
        """Run ``callback`` on the next frame (replaces a pending one)."""
        ...

    def cancel(self) -> None:
        """Drop the pending callback, if any. Safe to call repeatedly."""
        ...

    def is_pending(self) -> bool:
        ...


class QtFrameScheduler:
    """Frame scheduler backed by one single-shot QTimer.

    A single timer per editor guarantees that at most one playback tick is
    ever pending, and stop() guarantees no stale tick fires afterwards.
    """

    def __init__(self, interval_ms: int = 16, parent: Optional[QObject] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._callback: Optional[FrameCallback] = None
        self._interval = max(1, interval_ms)

        self.timer = QTimer(parent)
        self.timer.setSingleShot(True)
        self.timer.timeout.connect(self._on_timeout)

    @property
    def interval(self) -> int:
        return self._interval

    def set_interval(self, interval_ms: int) -> None:
        """Change the frame interval (1-1000 ms)."""
        self._interval = max(1, min(1000, interval_ms))
        self.logger.debug(f"Frame interval set to {self._interval}ms")

    def request_frame(self, callback: FrameCallback) -> None:
        self._callback = callback
        if not self.timer.isActive():
            self.timer.start(self._interval)

    def cancel(self) -> None:
        self._callback = None
        if self.timer.isActive():
            self.timer.stop()

    def is_pending(self) -> bool:
        return self._callback is not None

    def _on_timeout(self) -> None:
        callback, self._callback = self._callback, None
        if callback is None:
            return
        try:
            callback()
        except Exception as e:
            self.logger.error(f"Error in frame callback: {e}", exc_info=True)
