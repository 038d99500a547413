"""Shared fixtures: an offscreen Qt application, a manual scheduler and stores in tmp dirs."""

from __future__ import annotations

import os
import random
from pathlib import Path
from typing import Callable, List, Optional

import pytest
from PySide6.QtWidgets import QApplication

from memory_router.core.config import GameConfig, load_config
from memory_router.core.controller import RoundController
from memory_router.core.history import ScoreHistory
from memory_router.core.session import GameMode


@pytest.fixture(scope="session", autouse=True)
def qt_app() -> QApplication:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


class ManualCall:
    def __init__(self, due: int, order: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.order = order
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False


class ManualScheduler:
    """Virtual-time scheduler: nothing runs until ``advance()`` is called."""

    def __init__(self) -> None:
        self.now = 0
        self._calls: List[ManualCall] = []
        self._order = 0

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ManualCall:
        self._order += 1
        call = ManualCall(self.now + max(0, int(delay_ms)), self._order, callback)
        self._calls.append(call)
        return call

    @property
    def pending(self) -> int:
        return sum(1 for c in self._calls if c.active)

    def next_due(self) -> Optional[int]:
        active = [c.due for c in self._calls if c.active]
        return min(active) if active else None

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [c for c in self._calls if c.active and c.due <= target]
            if not due:
                break
            call = min(due, key=lambda c: (c.due, c.order))
            self.now = call.due
            call.cancel()
            call.callback()
        self.now = target
        self._calls = [c for c in self._calls if c.active]


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture(scope="session")
def game_config() -> GameConfig:
    return load_config(Path(__file__).resolve().parent.parent / "memory_router" / "data" / "game.yaml")


@pytest.fixture()
def history(tmp_path: Path) -> ScoreHistory:
    return ScoreHistory(file_path=tmp_path / "scores.json")


@pytest.fixture()
def controller(game_config: GameConfig, history: ScoreHistory, scheduler: ManualScheduler) -> RoundController:
    return RoundController(
        config=game_config,
        history=history,
        scheduler=scheduler,
        rng=random.Random(1234),
    )


def reveal_time_ms(config: GameConfig, length: int, level: int = 1, mode: GameMode = GameMode.NORMAL) -> int:
    """Virtual time from round start until the input phase opens."""
    from memory_router.core.reveal import reveal_duration_ms

    t = config.timing
    display = reveal_duration_ms(level, mode == GameMode.SPEED, t)
    return t.pre_reveal_pause_ms + length * display + (length - 1) * t.reveal_gap_ms + t.reveal_final_pause_ms
