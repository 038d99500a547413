"""Delayed callbacks on the Qt event loop.

Every timed piece of the game (countdown ticks, reveal steps, feedback pauses,
boost expiry) is scheduled through a :class:`Scheduler`. The Qt implementation
uses single-shot ``QTimer`` objects, so callbacks run one at a time on the GUI
thread. Tests swap in a manual scheduler that advances virtual time.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from PySide6.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)


class ScheduledCall(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall: ...


class QtScheduledCall:
    """Handle for one pending ``QTimer`` shot. ``cancel()`` is idempotent."""

    def __init__(self, timer: QTimer, callback: Callable[[], None]) -> None:
        self._timer: Optional[QTimer] = timer
        self._callback = callback
        timer.timeout.connect(self._fire)

    @property
    def active(self) -> bool:
        return self._timer is not None

    def cancel(self) -> None:
        timer = self._timer
        if timer is None:
            return
        self._timer = None
        timer.stop()
        timer.deleteLater()

    def _fire(self) -> None:
        if self._timer is None:
            return
        self.cancel()
        self._callback()


class QtScheduler(QObject):
    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> QtScheduledCall:
        timer = QTimer(self)
        timer.setSingleShot(True)
        call = QtScheduledCall(timer, callback)
        timer.start(max(0, int(delay_ms)))
        return call
