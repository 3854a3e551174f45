"""Conversion of configured phase durations into whole seconds."""

from __future__ import annotations

import math
from typing import Any

from .constants import PHASE_LONG_BREAK, PHASE_SHORT_BREAK, PHASE_WORK


def parse_duration_seconds(value: Any) -> int:
    """Return whole seconds for a duration given in minutes or as `mm:ss`.

    Numbers (and numeric strings) are minutes and are rounded to the nearest
    second. Strings containing a colon are read as `minutes:seconds`; a
    component that is not an integer counts as zero. Anything else resolves
    to zero, so a misconfigured phase becomes an immediately expiring timer.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return _minutes_to_seconds(float(value))
    if not isinstance(value, str):
        return 0

    text = value.strip()
    if ":" in text:
        minutes_text, _, seconds_text = text.partition(":")
        total = _as_int(minutes_text) * 60 + _as_int(seconds_text)
        return max(0, total)

    try:
        minutes = float(text)
    except ValueError:
        return 0
    return _minutes_to_seconds(minutes)


def seconds_for(phase: str, settings) -> int:
    """Resolve the configured duration of `phase` in whole seconds."""
    if phase == PHASE_WORK:
        return parse_duration_seconds(settings.work_duration)
    if phase == PHASE_SHORT_BREAK:
        return parse_duration_seconds(settings.short_break_duration)
    if phase == PHASE_LONG_BREAK:
        return parse_duration_seconds(settings.long_break_duration)
    return 0


def _minutes_to_seconds(minutes: float) -> int:
    if not math.isfinite(minutes):
        return 0
    # Half-up rounding; round() would use banker's rounding.
    return max(0, int(math.floor(minutes * 60 + 0.5)))


def _as_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0
