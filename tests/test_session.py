"""Tests for memory_router.core.session – session state and entry checks."""

from __future__ import annotations

import pytest

from memory_router.core.controller import RoundController
from memory_router.core.history import ScoreHistory
from memory_router.core.session import (
    EntryState,
    GameMode,
    RoundRecord,
    Session,
    Status,
    classify_entry,
    normalize_entry,
    normalize_player_name,
    parse_mode,
)
from memory_router.core.timer import RoundTimer


# ---------------------------------------------------------------------------
# Session defaults
# ---------------------------------------------------------------------------

class TestSessionDefaults:
    def test_fresh_session(self):
        s = Session()
        assert s.level == 1
        assert s.score == 0
        assert s.streak == 0
        assert s.max_streak == 0
        assert s.boosts == 0
        assert s.boost_active is False
        assert s.status == Status.IDLE
        assert s.mode == GameMode.NORMAL

    def test_lists_not_shared(self):
        a, b = Session(), Session()
        a.sequence.append("1")
        assert b.sequence == []


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class TestTransitions:
    @pytest.mark.parametrize(
        "source,target",
        [
            (Status.IDLE, Status.DISPLAYING),
            (Status.DISPLAYING, Status.INPUT),
            (Status.INPUT, Status.FEEDBACK),
            (Status.FEEDBACK, Status.DISPLAYING),
            (Status.FEEDBACK, Status.INPUT),
            (Status.FEEDBACK, Status.OVER),
            (Status.OVER, Status.IDLE),
        ],
    )
    def test_allowed(self, source: Status, target: Status):
        assert Session(status=source).can_transition(target)

    @pytest.mark.parametrize(
        "source,target",
        [
            (Status.IDLE, Status.INPUT),
            (Status.DISPLAYING, Status.FEEDBACK),
            (Status.INPUT, Status.OVER),
            (Status.INPUT, Status.DISPLAYING),
            (Status.OVER, Status.INPUT),
        ],
    )
    def test_forbidden(self, source: Status, target: Status):
        assert not Session(status=source).can_transition(target)


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

class TestRecordOutcome:
    def test_correct(self):
        s = Session()
        granted = s.record_correct(130, boost_every=5)
        assert granted is False
        assert (s.score, s.streak, s.max_streak, s.level) == (130, 1, 1, 2)

    def test_boost_every_fifth(self):
        s = Session()
        grants = [s.record_correct(10, boost_every=5) for _ in range(10)]
        assert grants == [False] * 4 + [True] + [False] * 4 + [True]
        assert s.boosts == 2
        assert s.rounds_since_boost == 0

    def test_wrong_resets_streak_keeps_max(self):
        s = Session()
        for _ in range(3):
            s.record_correct(10, boost_every=5)
        s.record_wrong()
        assert s.streak == 0
        assert s.max_streak == 3
        assert s.streak <= s.max_streak

    def test_round_log_newest_first_and_capped(self):
        s = Session()
        for level in range(1, 6):
            s.log_round(RoundRecord(level, "L", True, level), limit=3)
        assert [r.level for r in s.round_log] == [5, 4, 3]


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

class TestEntries:
    def test_normalize(self):
        assert normalize_entry(" a f ", "AF") == "AF"
        assert normalize_entry("abc", "AB") == "AB"
        assert normalize_entry("", "7") == ""

    @pytest.mark.parametrize(
        "value,expected,state",
        [
            ("", "A3", EntryState.EMPTY),
            ("A", "A3", EntryState.PREFIX_MATCH),
            ("B", "A3", EntryState.PREFIX_WRONG),
            ("A3", "A3", EntryState.FILLED_CORRECT),
            ("A4", "A3", EntryState.FILLED_WRONG),
            ("7", "7", EntryState.FILLED_CORRECT),
            ("8", "7", EntryState.FILLED_WRONG),
        ],
    )
    def test_classify(self, value, expected, state):
        assert classify_entry(value, expected) == state

    def test_complete_and_correct(self):
        s = Session(sequence=["1", "AB"], entries=["1", "A"])
        assert not s.is_complete()
        s.entries[1] = "AB"
        assert s.is_complete()
        assert s.is_correct()
        s.entries[0] = "2"
        assert not s.is_correct()

    def test_expected_lengths(self):
        assert Session(sequence=["1F", "0A", "C3"]).expected_lengths() == [2, 2, 2]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_player_name(self):
        assert normalize_player_name("  ada lovelace the great ") == "ADA LOVELACE"
        assert normalize_player_name("   ") == ""

    def test_parse_mode(self):
        assert parse_mode("strict") == GameMode.STRICT
        assert parse_mode("bogus") == GameMode.NORMAL
        assert parse_mode(None) == GameMode.NORMAL


# ---------------------------------------------------------------------------
# Public API documentation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "owner,name",
    [
        (Session, "can_transition"),
        (Session, "record_wrong"),
        (Session, "expected_lengths"),
        (Session, "is_correct"),
        (RoundController, "session"),
        (RoundController, "status"),
        (RoundController, "timer"),
        (RoundController, "reveal"),
        (RoundController, "hud_state"),
        (RoundController, "main_menu"),
        (ScoreHistory, "append"),
        (ScoreHistory, "top_n"),
        (ScoreHistory, "best_score"),
        (RoundTimer, "start"),
        (RoundTimer, "clear"),
    ],
)
def test_public_api_documented(owner, name):
    assert (getattr(owner, name).__doc__ or "").strip()
