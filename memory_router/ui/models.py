"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from memory_router.core.history import HistoryEntry
from memory_router.core.session import DEFAULT_PLAYER_NAME, RoundRecord

LEADERBOARD_ROWS = 8


@dataclass
class LeaderboardRow:
    """One rendered leaderboard line."""

    rank: int
    name: str
    score: str
    level: str


def format_score(score: int) -> str:
    return f"{score:,}"


def build_leaderboard_rows(entries: Sequence[HistoryEntry], limit: int = LEADERBOARD_ROWS) -> List[LeaderboardRow]:
    return [
        LeaderboardRow(
            rank=i + 1,
            name=entry.name or DEFAULT_PLAYER_NAME,
            score=format_score(entry.score),
            level=f"Lv{entry.level}",
        )
        for i, entry in enumerate(entries[:limit])
    ]


def format_round_record(record: RoundRecord) -> str:
    mark = "✓" if record.correct else "✗"
    return f"Lv{record.level:02d}  {record.label}  {mark}  +{record.points}"
