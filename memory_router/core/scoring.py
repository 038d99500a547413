"""Streak multiplier and round points."""

from __future__ import annotations

import math

from memory_router.core.config import ScoringRules

DEFAULT_RULES = ScoringRules()


def multiplier(streak: int, rules: ScoringRules = DEFAULT_RULES) -> int:
    """Value of the highest threshold not exceeding ``streak`` (1 below the first)."""
    value = 1
    for threshold, step_value in zip(rules.multiplier_thresholds, rules.multiplier_values):
        if streak >= threshold:
            value = step_value
        else:
            break
    return value


def multiplier_progress(streak: int, rules: ScoringRules = DEFAULT_RULES) -> float:
    """Fraction (0..1) of the way from the current threshold to the next one."""
    thresholds = rules.multiplier_thresholds
    if not thresholds:
        return 1.0
    if streak < thresholds[0]:
        return max(0.0, streak / thresholds[0])
    for low, high in zip(thresholds, thresholds[1:]):
        if streak < high:
            return (streak - low) / (high - low)
    return 1.0


def points(
    level: int,
    multiplier: int,
    time_remaining: int,
    time_budget: int,
    rules: ScoringRules = DEFAULT_RULES,
) -> int:
    """``base_points * level * multiplier`` plus a bonus for answering in the first half."""
    base = rules.base_points * level
    bonus = 0
    if time_budget > 0 and time_remaining > time_budget / 2:
        bonus = math.floor(rules.time_bonus * time_remaining / time_budget)
    return base * multiplier + bonus
