"""Tests for memory_router.ui.tones – sound cue synthesis."""

from __future__ import annotations

import io
import wave

import pytest

from memory_router.ui.tones import CUES, REVEAL_FREQUENCIES, SAMPLE_RATE, render_wav, tones_for


class TestTonesFor:
    def test_reveal_pitch_cycles(self):
        assert tones_for("reveal", 0)[0][0] == REVEAL_FREQUENCIES[0]
        assert tones_for("reveal", 8)[0][0] == REVEAL_FREQUENCIES[0]
        assert tones_for("reveal", 3)[0][0] == REVEAL_FREQUENCIES[3]

    @pytest.mark.parametrize("name", sorted(CUES))
    def test_named_cues(self, name: str):
        assert tones_for(name)

    def test_unknown_cue(self):
        with pytest.raises(ValueError):
            tones_for("explosion")


class TestRenderWav:
    def test_valid_mono_wav(self):
        data = render_wav(tones_for("tick"))
        with wave.open(io.BytesIO(data), "rb") as wav:
            assert wav.getnchannels() == 1
            assert wav.getsampwidth() == 2
            assert wav.getframerate() == SAMPLE_RATE
            # 0.04 s tone + 0.05 s tail
            assert abs(wav.getnframes() - 0.09 * SAMPLE_RATE) <= 1

    def test_delayed_tones_extend_length(self):
        with wave.open(io.BytesIO(render_wav(tones_for("success"))), "rb") as wav:
            assert wav.getnframes() >= int(0.68 * SAMPLE_RATE)
