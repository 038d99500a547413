from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from memory_router.core.config import Phase


@dataclass(frozen=True)
class RoundConfig:
    """Everything a round needs that depends only on the level."""

    level: int
    alphabet: str
    token_length: int
    length: int
    timer_seconds: int
    phase: str
    label: str


def phase_for(level: int, phases: Sequence[Phase]) -> Phase:
    if level < 1:
        raise ValueError(f"Level must be >= 1, got {level}")
    for phase in phases:
        if phase.covers(level):
            return phase
    raise ValueError(f"No phase covers level {level}")


def select_round_config(level: int, phases: Sequence[Phase]) -> RoundConfig:
    """Map a level to its round config. Deterministic and side-effect free."""
    phase = phase_for(level, phases)
    return RoundConfig(
        level=level,
        alphabet=phase.alphabet,
        token_length=phase.token_length,
        length=phase.length_for(level),
        timer_seconds=phase.timer_seconds,
        phase=phase.phase,
        label=phase.label,
    )


def is_phase_change(previous_label: str, config: RoundConfig) -> bool:
    """True when a banner should announce ``config``'s phase.

    An empty ``previous_label`` means the session has not played a round yet,
    so the first phase is never announced.
    """
    return bool(previous_label) and previous_label != config.label
