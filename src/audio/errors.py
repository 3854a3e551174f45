"""Audio package exceptions."""


class AudioError(Exception):
    """Raised when an audio clip cannot be loaded or played."""
