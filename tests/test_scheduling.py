"""Tests for memory_router.core.scheduling – QTimer-backed delayed calls."""

from __future__ import annotations

from PySide6.QtCore import QEventLoop, QTimer

from memory_router.core.scheduling import QtScheduler


def _spin(ms: int) -> None:
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


# ===========================================================================
# QtScheduler.call_later
# ===========================================================================

class TestQtScheduler:
    def test_call_fires_once(self):
        scheduler = QtScheduler()
        fired = []
        call = scheduler.call_later(10, lambda: fired.append("a"))
        assert call.active
        _spin(60)
        assert fired == ["a"]
        assert not call.active
        _spin(30)
        assert fired == ["a"]

    def test_cancelled_call_never_runs(self):
        scheduler = QtScheduler()
        fired = []
        kept = scheduler.call_later(10, lambda: fired.append("kept"))
        dropped = scheduler.call_later(10, lambda: fired.append("dropped"))
        dropped.cancel()
        _spin(60)
        assert fired == ["kept"]
        assert not kept.active
        assert not dropped.active

    def test_cancel_is_idempotent(self):
        scheduler = QtScheduler()
        call = scheduler.call_later(10, lambda: None)
        call.cancel()
        call.cancel()
        assert not call.active

    def test_cancel_after_fire_is_noop(self):
        scheduler = QtScheduler()
        fired = []
        call = scheduler.call_later(0, lambda: fired.append(True))
        _spin(30)
        call.cancel()
        assert fired == [True]

    def test_calls_run_in_due_order(self):
        scheduler = QtScheduler()
        fired = []
        scheduler.call_later(40, lambda: fired.append("late"))
        scheduler.call_later(5, lambda: fired.append("early"))
        _spin(100)
        assert fired == ["early", "late"]
