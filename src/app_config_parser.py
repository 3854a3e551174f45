"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    AudioSettings,
    InputSettings,
    PomodoroSettings,
    UIServerSettings,
)

_ALLOWED_UI_VARIANTS = {"button"}
_CLOCK_DURATION = re.compile(r"^\d+:\d{1,2}$")


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        pomodoro=_parse_pomodoro_settings(_section(raw, "pomodoro"), base_dir=base_dir),
        input=_parse_input_settings(_section(raw, "input")),
        audio=_parse_audio_settings(_section(raw, "audio")),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir),
        source_file=source_file,
    )


def _parse_pomodoro_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> PomodoroSettings:
    defaults = PomodoroSettings()
    cycles = _as_int(
        section.get("cycles_before_long_break", defaults.cycles_before_long_break),
        "pomodoro.cycles_before_long_break",
    )
    if cycles < 1:
        raise AppConfigurationError("pomodoro.cycles_before_long_break must be >= 1.")

    hold = _as_float(
        section.get("completion_hold_seconds", defaults.completion_hold_seconds),
        "pomodoro.completion_hold_seconds",
    )
    if hold < 0:
        raise AppConfigurationError("pomodoro.completion_hold_seconds must be >= 0.")

    return PomodoroSettings(
        work_duration=_as_duration(
            section.get("work_duration", defaults.work_duration),
            "pomodoro.work_duration",
        ),
        short_break_duration=_as_duration(
            section.get("short_break_duration", defaults.short_break_duration),
            "pomodoro.short_break_duration",
        ),
        long_break_duration=_as_duration(
            section.get("long_break_duration", defaults.long_break_duration),
            "pomodoro.long_break_duration",
        ),
        cycles_before_long_break=cycles,
        pause_at_phase_boundary=_as_bool(
            section.get("pause_at_phase_boundary", defaults.pause_at_phase_boundary),
            "pomodoro.pause_at_phase_boundary",
        ),
        enable_sound=_as_bool(
            section.get("enable_sound", defaults.enable_sound),
            "pomodoro.enable_sound",
        ),
        work_end_sound_path=_as_optional_path(
            base_dir,
            section.get("work_end_sound_path"),
            "pomodoro.work_end_sound_path",
        ),
        break_end_sound_path=_as_optional_path(
            base_dir,
            section.get("break_end_sound_path"),
            "pomodoro.break_end_sound_path",
        ),
        completion_hold_seconds=hold,
    )


def _parse_input_settings(section: Mapping[str, Any]) -> InputSettings:
    long_press_ms = _as_int(section.get("long_press_ms", 2000), "input.long_press_ms")
    double_press_ms = _as_int(section.get("double_press_ms", 320), "input.double_press_ms")
    if long_press_ms <= 0:
        raise AppConfigurationError("input.long_press_ms must be > 0.")
    if double_press_ms < 0:
        raise AppConfigurationError("input.double_press_ms must be >= 0.")
    return InputSettings(long_press_ms=long_press_ms, double_press_ms=double_press_ms)


def _parse_audio_settings(section: Mapping[str, Any]) -> AudioSettings:
    return AudioSettings(
        enabled=_as_bool(section.get("enabled", True), "audio.enabled"),
        output_device=(
            _as_int(section.get("output_device"), "audio.output_device")
            if "output_device" in section
            else None
        ),
    )


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    ui = _as_ui_name(section.get("ui", "button"), "ui_server.ui")
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        ui=ui,
        index_file=_resolve_path(base_dir, index_file) if index_file else "",
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_duration(value: Any, field: str) -> Union[int, float, str]:
    """Accept whole/fractional minutes or an `mm:ss` string."""
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be minutes or an mm:ss string.")
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0:
            raise AppConfigurationError(f"{field} must be a non-negative number of minutes.")
        return value
    if isinstance(value, str):
        text = value.strip()
        if _CLOCK_DURATION.match(text):
            return text
        try:
            minutes = float(text)
        except ValueError as error:
            raise AppConfigurationError(
                f"{field} must be minutes or an mm:ss string, got: {value!r}"
            ) from error
        if not math.isfinite(minutes) or minutes < 0:
            raise AppConfigurationError(f"{field} must be a non-negative number of minutes.")
        return text
    raise AppConfigurationError(f"{field} must be minutes or an mm:ss string.")


def _as_optional_path(base_dir: Path, value: Any, field: str) -> Optional[str]:
    text = _as_str(value, field)
    if not text:
        return None
    return _resolve_path(base_dir, text)


def _as_ui_name(value: Any, field: str) -> str:
    name = _as_str(value, field).lower()
    if name not in _ALLOWED_UI_VARIANTS:
        allowed = ", ".join(sorted(_ALLOWED_UI_VARIANTS))
        raise AppConfigurationError(f"{field} must be one of: {allowed}.")
    return name


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
