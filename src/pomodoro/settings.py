"""Workflow configuration record and lenient normalization of host settings."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Union

from .constants import (
    DEFAULT_COMPLETION_HOLD_SECONDS,
    DEFAULT_CYCLES_BEFORE_LONG_BREAK,
    DEFAULT_ENABLE_SOUND,
    DEFAULT_LONG_BREAK_DURATION,
    DEFAULT_PAUSE_AT_PHASE_BOUNDARY,
    DEFAULT_SHORT_BREAK_DURATION,
    DEFAULT_WORK_DURATION,
)

DurationValue = Union[int, float, str]


@dataclass(frozen=True)
class WorkflowSettings:
    """Immutable settings snapshot consumed by the workflow state machine."""
    work_duration: DurationValue = DEFAULT_WORK_DURATION
    short_break_duration: DurationValue = DEFAULT_SHORT_BREAK_DURATION
    long_break_duration: DurationValue = DEFAULT_LONG_BREAK_DURATION
    cycles_before_long_break: int = DEFAULT_CYCLES_BEFORE_LONG_BREAK
    pause_at_phase_boundary: Optional[bool] = DEFAULT_PAUSE_AT_PHASE_BOUNDARY
    enable_sound: bool = DEFAULT_ENABLE_SOUND
    work_end_sound_path: Optional[str] = None
    break_end_sound_path: Optional[str] = None
    completion_hold_seconds: float = DEFAULT_COMPLETION_HOLD_SECONDS

    @property
    def completion_hold_ms(self) -> int:
        return int(round(max(0.0, self.completion_hold_seconds) * 1000))

    def with_overrides(self, **changes: Any) -> "WorkflowSettings":
        return replace(self, **changes)


DEFAULT_SETTINGS = WorkflowSettings()


def normalize_settings(
    raw: Optional[Mapping[str, Any]],
    *,
    defaults: WorkflowSettings = DEFAULT_SETTINGS,
) -> WorkflowSettings:
    """Build settings from a host payload, falling back to `defaults` per field.

    Host payloads come from property editors and may carry booleans and
    numbers as strings. Nothing here raises: unusable values are replaced by
    the corresponding default.
    """
    if not raw:
        return defaults

    return WorkflowSettings(
        work_duration=_duration(raw.get("work_duration"), defaults.work_duration),
        short_break_duration=_duration(
            raw.get("short_break_duration"),
            defaults.short_break_duration,
        ),
        long_break_duration=_duration(
            raw.get("long_break_duration"),
            defaults.long_break_duration,
        ),
        cycles_before_long_break=_cycles(
            raw.get("cycles_before_long_break"),
            defaults.cycles_before_long_break,
        ),
        pause_at_phase_boundary=_flag(
            raw.get("pause_at_phase_boundary"),
            defaults.pause_at_phase_boundary,
        ),
        enable_sound=bool(_flag(raw.get("enable_sound"), defaults.enable_sound)),
        work_end_sound_path=_path(
            raw.get("work_end_sound_path"),
            defaults.work_end_sound_path,
        ),
        break_end_sound_path=_path(
            raw.get("break_end_sound_path"),
            defaults.break_end_sound_path,
        ),
        completion_hold_seconds=_hold_seconds(
            raw.get("completion_hold_seconds"),
            defaults.completion_hold_seconds,
        ),
    )


def _duration(value: Any, default: DurationValue) -> DurationValue:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float, str)):
        return value
    return default


def _cycles(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return default
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return default


def _flag(value: Any, default: Optional[bool]) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return default


def _path(value: Any, default: Optional[str]) -> Optional[str]:
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip()
        return text or None
    return default


def _hold_seconds(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if isinstance(value, (int, float)) and math.isfinite(value) and value >= 0:
        return float(value)
    return default
