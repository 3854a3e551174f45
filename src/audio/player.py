"""High-level player that keeps a single current playback."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Protocol

import numpy as np

from .clips import AudioClip, load_wav_clip
from .errors import AudioError
from .tones import reset_cue

MAX_CACHED_CLIPS = 8


class AudioOutputLike(Protocol):
    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = True) -> None:
        ...

    def stop(self) -> None:
        ...


class SoundPlayer:
    """Plays sound files and synthesized cues, one at a time.

    Starting a playback stops whatever is currently playing. `play_*`
    methods block until the sound finished or was stopped.
    """

    def __init__(
        self,
        output: AudioOutputLike,
        logger: Optional[logging.Logger] = None,
    ):
        self._output = output
        self._logger = logger or logging.getLogger("audio")
        self._lock = threading.Lock()
        self._current_playback_id: Optional[str] = None
        self._clips: dict[str, tuple[float, AudioClip]] = {}
        self._reset_cue = reset_cue()

    def is_playing(self, playback_id: Optional[str] = None) -> bool:
        with self._lock:
            if playback_id is None:
                return self._current_playback_id is not None
            return self._current_playback_id == playback_id

    def play_file(self, path: str, playback_id: str) -> None:
        if not path:
            return
        self.play_clip(self._load(path), playback_id)

    def play_reset_cue(self) -> None:
        self.play_clip(self._reset_cue, "reset")

    def play_clip(self, clip: AudioClip, playback_id: str) -> None:
        self.stop()
        with self._lock:
            self._current_playback_id = playback_id

        self._logger.debug(
            "Playing %s (%d samples at %d Hz)",
            playback_id,
            len(clip.samples),
            clip.sample_rate_hz,
        )
        try:
            self._output.play(clip.samples, clip.sample_rate_hz)
        finally:
            with self._lock:
                if self._current_playback_id == playback_id:
                    self._current_playback_id = None

    def stop(self) -> None:
        with self._lock:
            playing = self._current_playback_id is not None
            self._current_playback_id = None
        if playing:
            self._output.stop()

    def _load(self, path: str) -> AudioClip:
        resolved = Path(path).expanduser()
        try:
            mtime = resolved.stat().st_mtime
        except OSError as error:
            raise AudioError(f"Sound file not found: {resolved}") from error

        key = str(resolved)
        with self._lock:
            cached = self._clips.get(key)
        if cached is not None and cached[0] == mtime:
            return cached[1]

        clip = load_wav_clip(resolved)
        with self._lock:
            # One entry per path, oldest path evicted first.
            self._clips.pop(key, None)
            self._clips[key] = (mtime, clip)
            while len(self._clips) > MAX_CACHED_CLIPS:
                del self._clips[next(iter(self._clips))]
        return clip
