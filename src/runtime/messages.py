"""Title and status text builders for button frames."""

from __future__ import annotations

from pomodoro.constants import PHASE_LONG_BREAK, PHASE_SHORT_BREAK, PHASE_WORK

_PHASE_LABELS = {
    PHASE_WORK: "Focus",
    PHASE_SHORT_BREAK: "Short break",
    PHASE_LONG_BREAK: "Long break",
}


def format_time(seconds: int) -> str:
    """Format seconds as `m:ss` (minutes are not zero-padded)."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{remainder:02d}"


def phase_label(phase: str) -> str:
    return _PHASE_LABELS.get(phase, phase)


def cycle_label(cycle_index: int, cycles_before_long_break: int) -> str:
    """Return the 1-based work session position, e.g. `2/4`."""
    total = max(1, int(cycles_before_long_break))
    position = min(total, max(0, int(cycle_index)) + 1)
    return f"{position}/{total}"


def status_message(mode: str, phase: str, remaining: int) -> str:
    """Build a short human-readable status line for the current frame."""
    label = phase_label(phase)
    if mode == "running":
        return f"{label} running ({format_time(remaining)} left)"
    if mode == "paused":
        return f"{label} paused ({format_time(remaining)} left)"
    if mode == "completion":
        return f"{label} done"
    if mode == "reset":
        return "Reset"
    return f"{label} ready ({format_time(remaining)})"
