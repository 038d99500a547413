from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from memory_router.core.history import data_dir
from memory_router.core.session import GameMode, normalize_player_name, parse_mode

logger = logging.getLogger(__name__)


@dataclass
class Preferences:
    mode: GameMode = GameMode.NORMAL
    sound_on: bool = True
    last_name: str = ""


class PreferencesStore:
    """Remembers mode, sound toggle and last player name between launches.
    File: ~/.memory_router/preferences.json."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or data_dir() / "preferences.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._prefs = self._load()

    @property
    def preferences(self) -> Preferences:
        return self._prefs

    def update(
        self,
        *,
        mode: Optional[GameMode] = None,
        sound_on: Optional[bool] = None,
        last_name: Optional[str] = None,
    ) -> Preferences:
        if mode is not None:
            self._prefs.mode = mode
        if sound_on is not None:
            self._prefs.sound_on = sound_on
        if last_name is not None:
            self._prefs.last_name = normalize_player_name(last_name)
        self._save()
        return self._prefs

    def _load(self) -> Preferences:
        if not self._file_path.exists():
            return Preferences()
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load preferences from %s: %s", self._file_path, e)
            return Preferences()
        if not isinstance(payload, dict):
            return Preferences()
        return Preferences(
            mode=parse_mode(payload.get("mode")),
            sound_on=bool(payload.get("sound_on", True)),
            last_name=normalize_player_name(str(payload.get("last_name", ""))),
        )

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = asdict(self._prefs)
        payload["mode"] = self._prefs.mode.value
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save preferences to %s: %s", self._file_path, e)
