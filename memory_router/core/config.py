from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from memory_router.core.sequence import ALPHABETS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MEMORY_ROUTER_CONFIG"


@dataclass(frozen=True)
class Phase:
    """A contiguous level range sharing one alphabet, length curve and timer."""

    phase: str
    label: str
    first_level: int
    last_level: Optional[int]
    alphabet: str
    token_length: int
    base_length: int
    grow_every: int
    max_length: int
    timer_seconds: int

    def covers(self, level: int) -> bool:
        if level < self.first_level:
            return False
        return self.last_level is None or level <= self.last_level

    def length_for(self, level: int) -> int:
        if self.grow_every <= 0:
            return min(self.base_length, self.max_length)
        grown = self.base_length + (level - self.first_level) // self.grow_every
        return min(grown, self.max_length)


@dataclass(frozen=True)
class Timing:
    reveal_base_ms: int = 700
    reveal_step_ms: int = 15
    reveal_min_ms: int = 300
    speed_mode_reduction_ms: int = 100
    reveal_gap_ms: int = 130
    reveal_final_pause_ms: int = 200
    pre_reveal_pause_ms: int = 350
    correct_feedback_ms: int = 1400
    practice_retry_ms: int = 1200
    game_over_delay_ms: int = 600
    boost_duration_ms: int = 8000
    practice_timer_seconds: int = 9999
    tick_warning_seconds: int = 5


@dataclass(frozen=True)
class ScoringRules:
    multiplier_thresholds: Tuple[int, ...] = (1, 2, 4, 7, 11)
    multiplier_values: Tuple[int, ...] = (1, 2, 3, 5, 8)
    base_points: int = 100
    time_bonus: int = 50
    boost_every: int = 5
    history_limit: int = 10
    round_log_limit: int = 20


@dataclass(frozen=True)
class GameConfig:
    phases: Tuple[Phase, ...]
    timing: Timing
    scoring: ScoringRules


def default_config_path() -> Path:
    """Path of the config file: ``$MEMORY_ROUTER_CONFIG`` or the packaged default."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parent.parent / "data" / "game.yaml"


def load_config(path: Optional[Path] = None) -> GameConfig:
    config_path = path or default_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Game config not found: {config_path}")

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{config_path.name}: expected a YAML mapping with 'phases'")

    phases = _parse_phases(config_path.name, raw.get("phases"))
    timing = _parse_section(config_path.name, "timing", raw.get("timing"), Timing)
    scoring = _parse_section(config_path.name, "scoring", raw.get("scoring"), ScoringRules)
    if len(scoring.multiplier_thresholds) != len(scoring.multiplier_values):
        raise ValueError(
            f"{config_path.name}: 'multiplier_thresholds' and 'multiplier_values' differ in length"
        )
    if list(scoring.multiplier_thresholds) != sorted(scoring.multiplier_thresholds):
        raise ValueError(f"{config_path.name}: 'multiplier_thresholds' must be ascending")

    logger.info("Loaded game config from %s (%d phases)", config_path, len(phases))
    return GameConfig(phases=phases, timing=timing, scoring=scoring)


def _parse_phases(file_name: str, raw_phases: Any) -> Tuple[Phase, ...]:
    if not raw_phases or not isinstance(raw_phases, list):
        raise ValueError(f"{file_name}: missing or invalid 'phases'")

    phases: List[Phase] = []
    for index, item in enumerate(raw_phases):
        if not isinstance(item, dict):
            raise ValueError(f"{file_name}: phase #{index + 1} is not a mapping")
        try:
            last_level = item.get("last_level")
            phase = Phase(
                phase=str(item["phase"]).strip(),
                label=str(item["label"]).strip(),
                first_level=int(item["first_level"]),
                last_level=None if last_level is None else int(last_level),
                alphabet=str(item["alphabet"]).strip(),
                token_length=int(item.get("token_length", 1)),
                base_length=int(item["base_length"]),
                grow_every=int(item.get("grow_every", 0)),
                max_length=int(item.get("max_length", item["base_length"])),
                timer_seconds=int(item["timer_seconds"]),
            )
        except KeyError as e:
            raise ValueError(f"{file_name}: phase #{index + 1} missing {e.args[0]!r}") from e
        except (TypeError, ValueError) as e:
            raise ValueError(f"{file_name}: phase #{index + 1} has an invalid value: {e}") from e

        if phase.alphabet not in ALPHABETS:
            raise ValueError(f"{file_name}: phase #{index + 1} has unknown alphabet {phase.alphabet!r}")
        if phase.base_length < 1 or phase.max_length < 1 or phase.token_length < 1:
            raise ValueError(f"{file_name}: phase #{index + 1} lengths must be positive")
        if phase.timer_seconds < 1:
            raise ValueError(f"{file_name}: phase #{index + 1} 'timer_seconds' must be positive")
        phases.append(phase)

    expected_first = 1
    for index, phase in enumerate(phases):
        if phase.first_level != expected_first:
            raise ValueError(
                f"{file_name}: phase {phase.phase!r} starts at level {phase.first_level}, "
                f"expected {expected_first}"
            )
        is_last = index == len(phases) - 1
        if phase.last_level is None:
            if not is_last:
                raise ValueError(f"{file_name}: only the final phase may be open-ended")
            break
        if is_last:
            raise ValueError(f"{file_name}: the final phase must have 'last_level: null'")
        if phase.last_level < phase.first_level:
            raise ValueError(f"{file_name}: phase {phase.phase!r} ends before it starts")
        expected_first = phase.last_level + 1

    return tuple(phases)


def _parse_section(file_name: str, name: str, raw: Any, cls):
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError(f"{file_name}: '{name}' must be a mapping")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"{file_name}: unknown '{name}' keys: {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in raw.items():
        try:
            if isinstance(value, list):
                values[key] = tuple(int(v) for v in value)
            else:
                values[key] = int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{file_name}: '{name}.{key}' must be numeric") from e
    return cls(**values)
