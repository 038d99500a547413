"""Tone tables for the sound cues and a small WAV renderer."""

from __future__ import annotations

import io
import math
import struct
import wave
from typing import Dict, List, Tuple

SAMPLE_RATE = 22050
MASTER_GAIN = 0.35

# (frequency Hz, duration s, waveform, volume, delay s)
Tone = Tuple[float, float, str, float, float]

REVEAL_FREQUENCIES = [440, 494, 523, 587, 659, 698, 784, 880]

CUES: Dict[str, List[Tone]] = {
    "success": [
        (523, 0.3, "sine", 0.4, 0.0),
        (659, 0.3, "sine", 0.4, 0.07),
        (784, 0.3, "sine", 0.4, 0.14),
        (1047, 0.4, "sine", 0.3, 0.28),
    ],
    "fail": [
        (200, 0.2, "sawtooth", 0.5, 0.0),
        (150, 0.3, "sawtooth", 0.4, 0.15),
        (120, 0.4, "square", 0.3, 0.32),
    ],
    "tick": [(880, 0.04, "square", 0.15, 0.0)],
    "wrong_key": [(180, 0.1, "sawtooth", 0.4, 0.0)],
    "level_up": [(f, 0.15, "sine", 0.4, i * 0.07) for i, f in enumerate([880, 988, 1047, 1175])],
    "boost": [(f, 0.15, "sine", 0.45, i * 0.1) for i, f in enumerate([700, 900, 1100])],
}


def reveal_tones(index: int) -> List[Tone]:
    freq = REVEAL_FREQUENCIES[index % len(REVEAL_FREQUENCIES)]
    return [(freq, 0.09, "square", 0.28, 0.0), (freq * 2, 0.07, "sine", 0.13, 0.02)]


def tones_for(name: str, index: int = 0) -> List[Tone]:
    if name == "reveal":
        return reveal_tones(index)
    try:
        return CUES[name]
    except KeyError:
        raise ValueError(f"Unknown sound cue: {name!r}") from None


def _wave_sample(waveform: str, phase: float) -> float:
    if waveform == "square":
        return 1.0 if math.sin(phase) >= 0 else -1.0
    if waveform == "sawtooth":
        cycle = (phase / (2 * math.pi)) % 1.0
        return 2.0 * cycle - 1.0
    return math.sin(phase)


def render_wav(tones: List[Tone], sample_rate: int = SAMPLE_RATE) -> bytes:
    """Mix ``tones`` into a mono 16-bit WAV with a short attack and exponential decay."""
    length_s = max(delay + duration for _, duration, _, _, delay in tones) + 0.05
    samples = [0.0] * int(length_s * sample_rate)
    attack = max(1, int(0.01 * sample_rate))
    for freq, duration, waveform, volume, delay in tones:
        start = int(delay * sample_rate)
        for n in range(int(duration * sample_rate)):
            t = n / sample_rate
            if n < attack:
                envelope = n / attack
            else:
                envelope = math.exp(-6.9 * (t - 0.01) / max(duration - 0.01, 1e-3))
            samples[start + n] += volume * envelope * _wave_sample(waveform, 2 * math.pi * freq * t)

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as out:
        out.setnchannels(1)
        out.setsampwidth(2)
        out.setframerate(sample_rate)
        out.writeframes(
            b"".join(struct.pack("<h", int(max(-1.0, min(1.0, s * MASTER_GAIN)) * 32767)) for s in samples)
        )
    return buffer.getvalue()
