from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import QObject, Signal

from memory_router.core.config import Timing
from memory_router.core.scheduling import ScheduledCall, Scheduler

logger = logging.getLogger(__name__)


def reveal_duration_ms(level: int, speed_mode: bool, timing: Timing) -> int:
    """How long each token stays visible; shorter at higher levels and in speed mode."""
    reduction = (level - 1) * timing.reveal_step_ms
    if speed_mode:
        reduction += timing.speed_mode_reduction_ms
    return max(timing.reveal_min_ms, timing.reveal_base_ms - reduction)


class RevealScheduler(QObject):
    """Shows the tokens of a sequence one after another.

    Token *i* is revealed for ``display_ms``, concealed, and after
    ``gap_ms`` token *i + 1* follows. ``final_pause_ms`` after the last
    token is concealed the completion callback runs once.
    """

    revealed = Signal(int, str)
    concealed = Signal(int)

    def __init__(self, scheduler: Scheduler, timing: Timing, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._scheduler = scheduler
        self._gap_ms = timing.reveal_gap_ms
        self._final_pause_ms = timing.reveal_final_pause_ms
        self._pending: Optional[ScheduledCall] = None
        self._generation = 0
        self._sequence: List[str] = []
        self._display_ms = timing.reveal_base_ms
        self._on_complete: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._on_complete is not None

    def start(self, sequence: Sequence[str], display_ms: int, on_complete: Callable[[], None]) -> None:
        if self.active:
            logger.warning("RevealScheduler.start() while a reveal is running; cancelling it first")
            self.cancel()
        self._sequence = list(sequence)
        self._display_ms = display_ms
        self._on_complete = on_complete
        logger.debug("Revealing %d tokens at %d ms each", len(self._sequence), display_ms)
        self._show(0, self._generation)

    def cancel(self) -> None:
        self._generation += 1
        self._on_complete = None
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _after(self, delay_ms: int, generation: int, step: Callable[[], None]) -> None:
        def run() -> None:
            if generation != self._generation:
                return
            self._pending = None
            step()

        self._pending = self._scheduler.call_later(delay_ms, run)

    def _show(self, index: int, generation: int) -> None:
        if index >= len(self._sequence):
            self._after(self._final_pause_ms, generation, self._complete)
            return
        self.revealed.emit(index, self._sequence[index])
        self._after(self._display_ms, generation, lambda: self._hide(index, generation))

    def _hide(self, index: int, generation: int) -> None:
        self.concealed.emit(index)
        if index + 1 >= len(self._sequence):
            self._after(self._final_pause_ms, generation, self._complete)
        else:
            self._after(self._gap_ms, generation, lambda: self._show(index + 1, generation))

    def _complete(self) -> None:
        on_complete = self._on_complete
        self._on_complete = None
        if on_complete is not None:
            on_complete()
