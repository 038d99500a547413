from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from memory_router.core.scheduling import ScheduledCall, Scheduler

logger = logging.getLogger(__name__)

TICK_MS = 1000


class RoundTimer(QObject):
    """Whole-second countdown for the input phase.

    While ``frozen`` is set the one-second tick keeps running but the
    remaining time does not change. ``clear()`` stops everything, and any
    tick already queued before the clear is ignored.
    """

    ticked = Signal(int, int)  # remaining, total

    def __init__(self, scheduler: Scheduler, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._scheduler = scheduler
        self._pending: Optional[ScheduledCall] = None
        self._generation = 0
        self._on_expire: Optional[Callable[[], None]] = None
        self._total = 0
        self._remaining = 0
        self.frozen = False

    @property
    def active(self) -> bool:
        """True while a countdown is scheduled."""
        return self._pending is not None

    @property
    def remaining(self) -> int:
        """Seconds left on the current countdown."""
        return self._remaining

    @property
    def total(self) -> int:
        """Seconds the current countdown started with."""
        return self._total

    def start(self, seconds: int, on_expire: Callable[[], None]) -> None:
        """Count down from ``seconds`` and call ``on_expire`` once at zero."""
        if self.active:
            logger.warning("RoundTimer.start() while a countdown is running; clearing it first")
            self.clear()
        self._total = seconds
        self._remaining = seconds
        self._on_expire = on_expire
        self.ticked.emit(self._remaining, self._total)
        self._schedule(self._generation)

    def clear(self) -> None:
        """Stop the countdown. Safe to call when nothing is running."""
        self._generation += 1
        self._on_expire = None
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule(self, generation: int) -> None:
        self._pending = self._scheduler.call_later(TICK_MS, lambda: self._tick(generation))

    def _tick(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._pending = None
        if self.frozen:
            self._schedule(generation)
            return

        self._remaining -= 1
        logger.debug("Timer tick: %d/%d", self._remaining, self._total)
        self.ticked.emit(self._remaining, self._total)
        # A ticked handler may have cleared or restarted the timer.
        if generation != self._generation:
            return
        if self._remaining <= 0:
            on_expire = self._on_expire
            self.clear()
            if on_expire is not None:
                on_expire()
            return
        self._schedule(generation)
