"""Tests for memory_router.core.difficulty – level to round config."""

from __future__ import annotations

import pytest

from memory_router.core.config import GameConfig
from memory_router.core.difficulty import (
    RoundConfig,
    is_phase_change,
    phase_for,
    select_round_config,
)
from memory_router.core.sequence import generate_sequence


# ---------------------------------------------------------------------------
# Phase boundaries
# ---------------------------------------------------------------------------

class TestPhases:
    @pytest.mark.parametrize("level", [1, 2, 3, 4])
    def test_first_phase_is_four_digits_ten_seconds(self, game_config: GameConfig, level: int):
        cfg = select_round_config(level, game_config.phases)
        assert cfg.alphabet == "digits"
        assert cfg.length == 4
        assert cfg.timer_seconds == 10
        assert cfg.token_length == 1
        assert cfg.label == "DECIMAL INIT"

    @pytest.mark.parametrize(
        "level,expected_length",
        [(5, 5), (6, 5), (7, 6), (8, 6)],
    )
    def test_digit_stream_grows_every_two_levels(self, game_config: GameConfig, level, expected_length):
        cfg = select_round_config(level, game_config.phases)
        assert cfg.alphabet == "digits"
        assert cfg.length == expected_length
        assert cfg.timer_seconds == 13

    def test_alpha_phase(self, game_config: GameConfig):
        cfg = select_round_config(9, game_config.phases)
        assert cfg.alphabet == "letters"
        assert cfg.length == 5
        assert cfg.timer_seconds == 15
        assert select_round_config(14, game_config.phases).length == 7

    def test_hex_phase_uses_two_char_tokens(self, game_config: GameConfig):
        cfg = select_round_config(15, game_config.phases)
        assert cfg.alphabet == "hex"
        assert cfg.token_length == 2
        assert cfg.length == 6
        assert cfg.timer_seconds == 20
        assert select_round_config(20, game_config.phases).length == 8

    def test_mixed_phase_saturates(self, game_config: GameConfig):
        assert select_round_config(21, game_config.phases).length == 8
        assert select_round_config(24, game_config.phases).length == 9
        assert select_round_config(33, game_config.phases).length == 12
        assert select_round_config(500, game_config.phases).length == 12
        assert select_round_config(500, game_config.phases).timer_seconds == 25
        assert select_round_config(500, game_config.phases).alphabet == "mixed"

    def test_labels_change_at_boundaries(self, game_config: GameConfig):
        labels = [select_round_config(lv, game_config.phases).label for lv in (4, 5, 8, 9, 14, 15, 20, 21)]
        assert labels == [
            "DECIMAL INIT",
            "DIGIT STREAM",
            "DIGIT STREAM",
            "ALPHA ROUTE",
            "ALPHA ROUTE",
            "HEX MATRIX",
            "HEX MATRIX",
            "MIXED PROTOCOL",
        ]

    def test_deterministic(self, game_config: GameConfig):
        assert select_round_config(17, game_config.phases) == select_round_config(17, game_config.phases)

    def test_level_zero_rejected(self, game_config: GameConfig):
        with pytest.raises(ValueError):
            phase_for(0, game_config.phases)


# ---------------------------------------------------------------------------
# Generator agrees with the selector
# ---------------------------------------------------------------------------

class TestGeneratorMatchesSelector:
    @pytest.mark.parametrize("level", list(range(1, 41)))
    def test_length_and_token_size(self, game_config: GameConfig, level: int):
        cfg = select_round_config(level, game_config.phases)
        seq = generate_sequence(cfg.length, cfg.alphabet, cfg.token_length)
        assert len(seq) == cfg.length
        assert all(len(token) == cfg.token_length for token in seq)


# ---------------------------------------------------------------------------
# Phase change signal
# ---------------------------------------------------------------------------

class TestPhaseChange:
    def _cfg(self, label: str) -> RoundConfig:
        return RoundConfig(1, "digits", 1, 4, 10, "PHASE 01", label)

    def test_never_on_first_round(self):
        assert is_phase_change("", self._cfg("DECIMAL INIT")) is False

    def test_same_label(self):
        assert is_phase_change("DECIMAL INIT", self._cfg("DECIMAL INIT")) is False

    def test_new_label(self):
        assert is_phase_change("DECIMAL INIT", self._cfg("DIGIT STREAM")) is True
