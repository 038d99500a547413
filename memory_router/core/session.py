from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

DEFAULT_PLAYER_NAME = "GUEST"
MAX_NAME_LENGTH = 12


class GameMode(str, Enum):
    NORMAL = "normal"
    STRICT = "strict"
    SPEED = "speed"
    PRACTICE = "practice"


MODE_DESCRIPTIONS = {
    GameMode.NORMAL: "Standard gameplay. Wrong answer = game over.",
    GameMode.STRICT: "Instant fail on any wrong character typed.",
    GameMode.SPEED: "Same progression but display time is shorter.",
    GameMode.PRACTICE: "No game over. Retry endlessly. Learn the flow.",
}


class Status(str, Enum):
    IDLE = "idle"
    DISPLAYING = "displaying"
    INPUT = "input"
    FEEDBACK = "feedback"
    OVER = "over"


ALLOWED_TRANSITIONS = {
    Status.IDLE: {Status.DISPLAYING},
    Status.DISPLAYING: {Status.INPUT, Status.IDLE},
    Status.INPUT: {Status.FEEDBACK, Status.IDLE},
    Status.FEEDBACK: {Status.DISPLAYING, Status.INPUT, Status.OVER, Status.IDLE},
    Status.OVER: {Status.DISPLAYING, Status.IDLE},
}


class EntryState(str, Enum):
    """How a single typed entry compares to its expected token."""

    EMPTY = "empty"
    PREFIX_MATCH = "prefix_match"
    PREFIX_WRONG = "prefix_wrong"
    FILLED_CORRECT = "filled_correct"
    FILLED_WRONG = "filled_wrong"


def normalize_entry(text: str, expected: str) -> str:
    """Uppercase, strip whitespace and cut to the expected token's length."""
    cleaned = re.sub(r"\s", "", text).upper()
    return cleaned[: len(expected)]


def classify_entry(value: str, expected: str) -> EntryState:
    """Compare a normalized entry with its expected token."""
    expected = expected.upper()
    if not value:
        return EntryState.EMPTY
    if len(value) >= len(expected):
        return EntryState.FILLED_CORRECT if value == expected else EntryState.FILLED_WRONG
    if expected.startswith(value):
        return EntryState.PREFIX_MATCH
    return EntryState.PREFIX_WRONG


def normalize_player_name(name: str) -> str:
    """Trim, uppercase and cap the name at twelve characters."""
    return name.strip().upper()[:MAX_NAME_LENGTH]


@dataclass(frozen=True)
class RoundRecord:
    level: int
    label: str
    correct: bool
    points: int


@dataclass(frozen=True)
class HudState:
    score: int
    level: int
    multiplier: int
    multiplier_progress: float
    best: int
    phase: str
    mode: GameMode


@dataclass(frozen=True)
class GameOverSummary:
    name: str
    score: int
    level: int
    max_streak: int
    mode: GameMode
    sequence: List[str]
    new_best: bool


@dataclass
class Session:
    """Mutable state of one game, from start/restart until game over or menu."""

    mode: GameMode = GameMode.NORMAL
    player_name: str = DEFAULT_PLAYER_NAME
    status: Status = Status.IDLE
    level: int = 1
    score: int = 0
    streak: int = 0
    max_streak: int = 0
    sequence: List[str] = field(default_factory=list)
    entries: List[str] = field(default_factory=list)
    boosts: int = 0
    boost_active: bool = False
    rounds_since_boost: int = 0
    last_phase_label: str = ""
    timer_left: int = 0
    timer_total: int = 0
    round_log: List[RoundRecord] = field(default_factory=list)

    def can_transition(self, target: Status) -> bool:
        """Return True if moving from the current status to ``target`` is allowed."""
        return target in ALLOWED_TRANSITIONS[self.status]

    def record_correct(self, earned: int, boost_every: int) -> bool:
        """Apply a correct round. Returns True when a boost was granted."""
        self.score += earned
        self.streak += 1
        self.max_streak = max(self.max_streak, self.streak)
        self.rounds_since_boost += 1
        granted = False
        if self.rounds_since_boost >= boost_every:
            self.boosts += 1
            self.rounds_since_boost = 0
            granted = True
        self.level += 1
        return granted

    def record_wrong(self) -> None:
        """Break the streak; ``max_streak`` is kept."""
        self.streak = 0

    def log_round(self, record: RoundRecord, limit: int) -> None:
        """Prepend ``record`` to the round log, keeping at most ``limit`` entries."""
        self.round_log.insert(0, record)
        del self.round_log[limit:]

    def expected_lengths(self) -> List[int]:
        """Character count of each token in the current sequence."""
        return [len(token) for token in self.sequence]

    def is_complete(self) -> bool:
        """True if every entry holds as many characters as its token."""
        if len(self.entries) != len(self.sequence):
            return False
        return all(len(value) >= len(token) for value, token in zip(self.entries, self.sequence))

    def is_correct(self) -> bool:
        """True if every entry matches its token exactly."""
        return self.entries == [token.upper() for token in self.sequence]


def parse_mode(value: Optional[str]) -> GameMode:
    """Map a stored mode name to ``GameMode``, falling back to normal."""
    try:
        return GameMode(value)
    except ValueError:
        return GameMode.NORMAL
