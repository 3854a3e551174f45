"""Sounddevice-backed audio playback for feedback cues and sound files."""

import logging
import threading
from typing import Optional

import numpy as np
import sounddevice as sd

from .errors import AudioError


class SoundDeviceAudioOutput:
    """Plays mono PCM arrays through a selected sounddevice output."""
    def __init__(
        self,
        output_device_index: Optional[int] = None,
        blocksize: int = 2048,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._blocksize = blocksize
        self._logger = logger or logging.getLogger(__name__)
        self._stop_requested = threading.Event()

    def stop(self) -> None:
        self._stop_requested.set()

    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = True) -> None:
        if wav.ndim != 1:
            raise AudioError("Expected mono PCM array for playback")
        if len(wav) == 0:
            raise AudioError("Cannot play empty audio buffer")

        self._stop_requested.clear()
        finished = threading.Event()
        pos = 0

        def callback(outdata, frames, time_info, status):
            nonlocal pos
            if status:
                self._logger.warning("Sounddevice status: %s", status)
            if self._stop_requested.is_set():
                outdata.fill(0)
                raise sd.CallbackAbort()

            end = pos + frames
            chunk = wav[pos:end]

            if len(chunk) < frames:
                outdata[: len(chunk), 0] = chunk
                outdata[len(chunk) :, 0] = 0
                raise sd.CallbackStop()

            outdata[:, 0] = chunk
            pos = end

        try:
            stream = sd.OutputStream(
                channels=1,
                samplerate=sample_rate_hz,
                blocksize=self._blocksize,
                callback=callback,
                device=self._output_device_index,
                dtype="float32",
                finished_callback=finished.set,
            )
            stream.start()
        except Exception as error:
            raise AudioError(f"Audio playback failed: {error}") from error

        if not blocking:
            threading.Thread(
                target=self._close_when_finished,
                args=(stream, finished, len(wav) / sample_rate_hz),
                daemon=True,
                name="audio-output",
            ).start()
            return

        self._close_when_finished(stream, finished, len(wav) / sample_rate_hz)

    def _close_when_finished(
        self,
        stream: sd.OutputStream,
        finished: threading.Event,
        duration_seconds: float,
    ) -> None:
        try:
            finished.wait(timeout=duration_seconds + 0.5)
        finally:
            try:
                stream.close()
            except Exception as error:
                self._logger.warning("Failed to close audio stream: %s", error)
