"""Synthesized feedback cues: reset double-tone and completion chime."""

from __future__ import annotations

import numpy as np

from .clips import AudioClip

DEFAULT_SAMPLE_RATE_HZ = 44100


def tone(
    frequency_hz: float,
    duration_ms: int,
    *,
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
    amplitude: float = 0.3,
) -> np.ndarray:
    """Sine tone with a cosine-squared fade in and out to avoid clicks."""
    count = max(0, int(round(sample_rate_hz * duration_ms / 1000)))
    if count == 0:
        return np.zeros(0, dtype=np.float32)

    t = np.arange(count, dtype=np.float32) / sample_rate_hz
    level = min(1.0, max(0.0, amplitude)) * 0.95
    wave_ = np.sin(2 * np.pi * frequency_hz * t) * level
    return (wave_ * _envelope(count, sample_rate_hz)).astype(np.float32)


def silence(duration_ms: int, *, sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ) -> np.ndarray:
    count = max(0, int(round(sample_rate_hz * duration_ms / 1000)))
    return np.zeros(count, dtype=np.float32)


def reset_cue(*, sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ) -> AudioClip:
    """Two short pips, high then low, played when the cycle is reset."""
    samples = np.concatenate(
        [
            tone(880.0, 90, sample_rate_hz=sample_rate_hz),
            silence(120, sample_rate_hz=sample_rate_hz),
            tone(660.0, 110, sample_rate_hz=sample_rate_hz),
        ]
    )
    return AudioClip(samples=samples, sample_rate_hz=sample_rate_hz)


def completion_chime(*, sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ) -> AudioClip:
    """Rising three-note chime used when no sound file is configured for preview."""
    notes = []
    for frequency_hz in (523.25, 659.25, 783.99):
        notes.append(tone(frequency_hz, 160, sample_rate_hz=sample_rate_hz))
        notes.append(silence(40, sample_rate_hz=sample_rate_hz))
    return AudioClip(samples=np.concatenate(notes), sample_rate_hz=sample_rate_hz)


def _envelope(count: int, sample_rate_hz: int) -> np.ndarray:
    # Up to 10 ms, never more than 20% of the tone.
    fade_seconds = min(0.01, (count / sample_rate_hz) * 0.2)
    fade = max(1, int(round(sample_rate_hz * fade_seconds)))
    fade = min(fade, count // 2 or 1)
    envelope = np.ones(count, dtype=np.float32)
    ramp = np.sin((np.pi / 2) * (np.arange(fade, dtype=np.float32) / fade)) ** 2
    envelope[:fade] = ramp
    envelope[count - fade :] = np.minimum(envelope[count - fade :], ramp[::-1])
    return envelope
