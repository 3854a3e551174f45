"""Public exports for feedback audio components.

`audio.output` is imported explicitly by the entry point because it loads
the PortAudio backend.
"""

from .clips import AudioClip, load_wav_clip
from .errors import AudioError
from .player import SoundPlayer
from .tones import completion_chime, reset_cue

__all__ = [
    "AudioClip",
    "AudioError",
    "SoundPlayer",
    "completion_chime",
    "load_wav_clip",
    "reset_cue",
]
