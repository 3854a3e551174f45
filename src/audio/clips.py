"""In-memory audio clips and PCM WAV loading."""

from __future__ import annotations

import wave
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .errors import AudioError

_SAMPLE_DTYPES = {
    1: np.uint8,
    2: np.int16,
    4: np.int32,
}


@dataclass(frozen=True)
class AudioClip:
    """Mono float32 samples in [-1, 1] with their sample rate."""
    samples: np.ndarray
    sample_rate_hz: int

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate_hz <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate_hz

    @property
    def duration_ms(self) -> int:
        return int(round(self.duration_seconds * 1000))


def load_wav_clip(path: str | Path) -> AudioClip:
    """Read an uncompressed PCM WAV file and downmix it to mono float32."""
    wav_path = Path(path).expanduser()
    if not wav_path.is_file():
        raise AudioError(f"Sound file not found: {wav_path}")

    try:
        with wave.open(str(wav_path), "rb") as reader:
            channels = reader.getnchannels()
            sample_width = reader.getsampwidth()
            sample_rate_hz = reader.getframerate()
            frames = reader.readframes(reader.getnframes())
    except (wave.Error, EOFError, OSError) as error:
        raise AudioError(f"Failed to read WAV file {wav_path}: {error}") from error

    dtype = _SAMPLE_DTYPES.get(sample_width)
    if dtype is None:
        raise AudioError(
            f"Unsupported WAV sample width in {wav_path}: {sample_width * 8} bits"
        )

    raw = np.frombuffer(frames, dtype=dtype)
    if sample_width == 1:
        # 8-bit WAV data is unsigned.
        samples = (raw.astype(np.float32) - 128.0) / 128.0
    else:
        samples = raw.astype(np.float32) / float(np.iinfo(dtype).max)

    if channels > 1:
        usable = len(samples) - (len(samples) % channels)
        samples = samples[:usable].reshape(-1, channels).mean(axis=1)

    return AudioClip(
        samples=np.clip(samples, -1.0, 1.0).astype(np.float32),
        sample_rate_hz=sample_rate_hz,
    )
