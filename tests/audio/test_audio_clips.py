import tempfile
import unittest
import wave
from pathlib import Path

import numpy as np

from audio import AudioError, completion_chime, load_wav_clip, reset_cue
from audio.tones import silence, tone


def _write_wav(path: Path, samples: np.ndarray, *, channels: int = 1, rate: int = 8000) -> None:
    with wave.open(str(path), "wb") as writer:
        writer.setnchannels(channels)
        writer.setsampwidth(samples.dtype.itemsize)
        writer.setframerate(rate)
        writer.writeframes(samples.tobytes())


class WavClipTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)

    def test_loads_16_bit_mono_as_normalized_float(self) -> None:
        path = self.root / "bell.wav"
        _write_wav(path, np.array([0, 16384, -32767, 32767], dtype=np.int16))

        clip = load_wav_clip(path)

        self.assertEqual(8000, clip.sample_rate_hz)
        self.assertEqual(np.float32, clip.samples.dtype)
        np.testing.assert_allclose(clip.samples, [0.0, 0.5, -1.0, 1.0], atol=1e-3)
        self.assertEqual(0, clip.duration_ms)

    def test_stereo_is_downmixed(self) -> None:
        path = self.root / "stereo.wav"
        _write_wav(path, np.array([32767, 0, -32767, 0], dtype=np.int16), channels=2)

        clip = load_wav_clip(path)

        np.testing.assert_allclose(clip.samples, [0.5, -0.5], atol=1e-3)

    def test_8_bit_samples_are_unsigned(self) -> None:
        path = self.root / "low.wav"
        _write_wav(path, np.array([128, 255, 0], dtype=np.uint8))

        clip = load_wav_clip(path)

        np.testing.assert_allclose(clip.samples, [0.0, 127 / 128, -1.0], atol=1e-6)

    def test_missing_and_invalid_files_raise_audio_error(self) -> None:
        with self.assertRaises(AudioError):
            load_wav_clip(self.root / "missing.wav")

        broken = self.root / "broken.wav"
        broken.write_bytes(b"not a wav file")
        with self.assertRaises(AudioError):
            load_wav_clip(broken)


class ToneTests(unittest.TestCase):
    def test_tone_length_and_faded_edges(self) -> None:
        samples = tone(440.0, 100, sample_rate_hz=8000)

        self.assertEqual(800, len(samples))
        self.assertAlmostEqual(0.0, float(samples[0]), places=6)
        self.assertLessEqual(float(np.max(np.abs(samples))), 0.3)

    def test_zero_length_tone_and_silence(self) -> None:
        self.assertEqual(0, len(tone(440.0, 0)))
        self.assertFalse(silence(10, sample_rate_hz=1000).any())

    def test_cues_have_expected_durations(self) -> None:
        self.assertEqual(320, reset_cue(sample_rate_hz=8000).duration_ms)
        self.assertEqual(600, completion_chime(sample_rate_hz=8000).duration_ms)


if __name__ == "__main__":
    unittest.main()
