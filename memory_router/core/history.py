from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


def data_dir() -> Path:
    """Directory holding the score and preference files."""
    return Path.home() / ".memory_router"


@dataclass(frozen=True)
class HistoryEntry:
    """One finished game as stored in the score file."""

    name: str
    score: int
    level: int
    max_streak: int
    mode: str
    timestamp: str

    @classmethod
    def now(cls, name: str, score: int, level: int, max_streak: int, mode: str) -> "HistoryEntry":
        """Build an entry stamped with the current UTC time."""
        stamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
        return cls(name=name, score=score, level=level, max_streak=max_streak, mode=mode, timestamp=stamp)


class ScoreHistory:
    """Ranked list of finished games, best score first.

    File: ~/.memory_router/scores.json. Only the top ``limit`` entries are
    kept; the list is re-sorted and truncated on every append.
    """

    def __init__(self, file_path: Optional[Path] = None, limit: int = DEFAULT_LIMIT) -> None:
        self._file_path = file_path or data_dir() / "scores.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._limit = limit
        self._entries = self._load()

    @property
    def file_path(self) -> Path:
        """Path of the JSON score file."""
        return self._file_path

    def append(self, entry: HistoryEntry) -> None:
        """Add a finished game, re-rank and persist."""
        self._entries.append(entry)
        self._entries.sort(key=lambda e: e.score, reverse=True)
        del self._entries[self._limit:]
        self._save()

    def top_n(self, n: int) -> List[HistoryEntry]:
        """Return the ``n`` best entries, highest score first."""
        return list(self._entries[: max(0, n)])

    def best_score(self) -> int:
        """Highest stored score, or 0 when the history is empty."""
        if not self._entries:
            return 0
        return max(e.score for e in self._entries)

    def clear(self) -> None:
        """Remove every stored entry."""
        self._entries = []
        self._save()

    def _load(self) -> List[HistoryEntry]:
        if not self._file_path.exists():
            return []
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load score history from %s: %s", self._file_path, e)
            return []
        if not isinstance(payload, list):
            logger.warning("Ignoring score history in %s: expected a list", self._file_path)
            return []

        entries: List[HistoryEntry] = []
        for value in payload:
            if not isinstance(value, dict):
                continue
            try:
                entries.append(
                    HistoryEntry(
                        name=str(value.get("name") or "GUEST"),
                        score=int(value.get("score", 0)),
                        level=int(value.get("level", 1)),
                        max_streak=int(value.get("max_streak", 0)),
                        mode=str(value.get("mode", "normal")),
                        timestamp=str(value.get("timestamp", "")),
                    )
                )
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed score entry %r: %s", value, e)
        entries.sort(key=lambda e: e.score, reverse=True)
        return entries[: self._limit]

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [asdict(entry) for entry in self._entries]
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save score history to %s: %s", self._file_path, e)
