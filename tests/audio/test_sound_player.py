import os
import tempfile
import threading
import unittest
import wave
from pathlib import Path

import numpy as np

from audio import AudioError, SoundPlayer
from audio.player import MAX_CACHED_CLIPS


class _OutputStub:
    def __init__(self):
        self.played: list[tuple[int, int]] = []
        self.stops = 0
        self.release = threading.Event()
        self.release.set()
        self.started = threading.Event()

    def play(self, wav, sample_rate_hz, blocking=True):
        self.played.append((len(wav), sample_rate_hz))
        self.started.set()
        self.release.wait(2.0)

    def stop(self):
        self.stops += 1
        self.release.set()


def _write_wav(path: Path, frames: int) -> None:
    with wave.open(str(path), "wb") as writer:
        writer.setnchannels(1)
        writer.setsampwidth(2)
        writer.setframerate(8000)
        writer.writeframes(np.zeros(frames, dtype=np.int16).tobytes())


class SoundPlayerTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name) / "bell.wav"
        _write_wav(self.path, 400)
        self.output = _OutputStub()
        self.player = SoundPlayer(self.output)

    def test_play_file_plays_decoded_clip(self) -> None:
        self.player.play_file(str(self.path), "preview")

        self.assertEqual([(400, 8000)], self.output.played)
        self.assertFalse(self.player.is_playing())

    def test_edited_file_replaces_its_cached_clip(self) -> None:
        self.player.play_file(str(self.path), "preview")
        _write_wav(self.path, 800)
        stat = self.path.stat()
        os.utime(self.path, (stat.st_atime, stat.st_mtime + 10))

        self.player.play_file(str(self.path), "preview")

        self.assertEqual([(400, 8000), (800, 8000)], self.output.played)
        self.assertEqual(1, len(self.player._clips))

    def test_clip_cache_is_bounded(self) -> None:
        paths = []
        for index in range(MAX_CACHED_CLIPS + 3):
            path = Path(self._tmp.name) / f"sound-{index}.wav"
            _write_wav(path, 100 + index)
            paths.append(str(path))
            self.player.play_file(str(path), "preview")

        self.assertEqual(MAX_CACHED_CLIPS, len(self.player._clips))
        self.assertNotIn(paths[0], self.player._clips)
        self.assertIn(paths[-1], self.player._clips)

    def test_empty_path_is_ignored(self) -> None:
        self.player.play_file("", "preview")
        self.assertEqual([], self.output.played)

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(AudioError):
            self.player.play_file(str(self.path.with_name("nope.wav")), "preview")

    def test_reset_cue_uses_synthesized_clip(self) -> None:
        self.player.play_reset_cue()
        self.assertEqual(1, len(self.output.played))

    def test_stop_interrupts_current_playback(self) -> None:
        self.output.release.clear()
        worker = threading.Thread(
            target=self.player.play_file,
            args=(str(self.path), "completion"),
        )
        worker.start()
        self.assertTrue(self.output.started.wait(2.0))
        self.assertTrue(self.player.is_playing("completion"))

        self.player.stop()
        worker.join(2.0)

        self.assertEqual(1, self.output.stops)
        self.assertFalse(self.player.is_playing())

    def test_stop_without_playback_does_not_touch_output(self) -> None:
        self.player.stop()
        self.assertEqual(0, self.output.stops)


if __name__ == "__main__":
    unittest.main()
