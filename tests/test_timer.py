"""Tests for memory_router.core.timer – the round countdown."""

from __future__ import annotations

from memory_router.core.timer import RoundTimer


def _make(scheduler):
    timer = RoundTimer(scheduler)
    ticks = []
    timer.ticked.connect(lambda remaining, total: ticks.append((remaining, total)))
    return timer, ticks


# ---------------------------------------------------------------------------
# Countdown
# ---------------------------------------------------------------------------

class TestCountdown:
    def test_start_announces_full_budget(self, scheduler):
        timer, ticks = _make(scheduler)
        timer.start(3, lambda: None)
        assert ticks == [(3, 3)]
        assert timer.active

    def test_decrements_once_per_second(self, scheduler):
        timer, ticks = _make(scheduler)
        timer.start(5, lambda: None)
        scheduler.advance(999)
        assert timer.remaining == 5
        scheduler.advance(1)
        assert timer.remaining == 4
        scheduler.advance(2000)
        assert ticks[-1] == (2, 5)

    def test_expires_exactly_once(self, scheduler):
        timer, _ = _make(scheduler)
        expired = []
        timer.start(2, lambda: expired.append(True))
        scheduler.advance(2000)
        assert expired == [True]
        assert not timer.active
        scheduler.advance(10_000)
        assert expired == [True]
        assert scheduler.pending == 0


# ---------------------------------------------------------------------------
# clear()
# ---------------------------------------------------------------------------

class TestClear:
    def test_clear_stops_countdown(self, scheduler):
        timer, ticks = _make(scheduler)
        expired = []
        timer.start(3, lambda: expired.append(True))
        scheduler.advance(1000)
        timer.clear()
        scheduler.advance(10_000)
        assert expired == []
        assert ticks == [(3, 3), (2, 3)]

    def test_clear_is_idempotent(self, scheduler):
        timer, _ = _make(scheduler)
        timer.clear()
        timer.clear()
        timer.start(1, lambda: None)
        timer.clear()
        timer.clear()
        assert not timer.active

    def test_stale_tick_is_ignored(self, scheduler):
        timer, ticks = _make(scheduler)
        timer.start(3, lambda: None)
        stale = timer._pending
        timer.clear()
        # Simulate a queued tick firing after cancellation.
        stale.callback()
        assert ticks == [(3, 3)]
        assert timer.remaining == 3

    def test_single_active_countdown(self, scheduler):
        timer, _ = _make(scheduler)
        first, second = [], []
        timer.start(2, lambda: first.append(True))
        scheduler.advance(1000)
        timer.start(3, lambda: second.append(True))
        assert scheduler.pending == 1
        scheduler.advance(10_000)
        assert first == []
        assert second == [True]


# ---------------------------------------------------------------------------
# Freeze
# ---------------------------------------------------------------------------

class TestFreeze:
    def test_frozen_timer_keeps_ticking_without_decrement(self, scheduler):
        timer, ticks = _make(scheduler)
        timer.start(5, lambda: None)
        timer.frozen = True
        scheduler.advance(3000)
        assert timer.remaining == 5
        assert timer.active
        assert ticks == [(5, 5)]
        timer.frozen = False
        scheduler.advance(1000)
        assert timer.remaining == 4

    def test_clear_stops_frozen_timer(self, scheduler):
        timer, _ = _make(scheduler)
        timer.start(5, lambda: None)
        timer.frozen = True
        scheduler.advance(2000)
        timer.clear()
        assert not timer.active
        assert scheduler.pending == 0
