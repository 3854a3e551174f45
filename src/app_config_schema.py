"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class PomodoroSettings:
    """Default timer settings from `[pomodoro]`, used until a client sends its own."""
    work_duration: Union[int, float, str] = "25:00"
    short_break_duration: Union[int, float, str] = "05:00"
    long_break_duration: Union[int, float, str] = "10:00"
    cycles_before_long_break: int = 4
    pause_at_phase_boundary: bool = True
    enable_sound: bool = False
    work_end_sound_path: Optional[str] = None
    break_end_sound_path: Optional[str] = None
    completion_hold_seconds: float = 3.0


@dataclass(frozen=True)
class InputSettings:
    """Press classification thresholds from `[input]`."""
    long_press_ms: int = 2000
    double_press_ms: int = 320


@dataclass(frozen=True)
class AudioSettings:
    """Sound output settings from `[audio]`."""
    enabled: bool = True
    output_device: Optional[int] = None


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    ui: str = "button"
    index_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    pomodoro: PomodoroSettings
    input: InputSettings
    audio: AudioSettings
    ui_server: UIServerSettings
    source_file: str
