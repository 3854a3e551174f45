"""Pure predicates and the Pomodoro cycle rule used by the workflow table."""

from __future__ import annotations

from .constants import PHASE_LONG_BREAK, PHASE_SHORT_BREAK, PHASE_WORK


def long_break_due(ctx) -> bool:
    """True when finishing the current work session completes a set."""
    return ctx.cycle_index + 1 >= ctx.settings.cycles_before_long_break


def pause_at_boundary(ctx) -> bool:
    """True unless the settings explicitly disable pausing between phases."""
    return ctx.settings.pause_at_phase_boundary is not False


def next_phase(phase: str, cycle_index: int, cycles_before_long_break: int) -> tuple[str, int]:
    """Return the phase following `phase` and the cycle index that goes with it.

    Work is followed by a short break, or by a long break once
    `cycles_before_long_break` work sessions are done; the index counts the
    finished work session either way. Every break is followed by work, and
    leaving a long break starts a new set.
    """
    if phase == PHASE_WORK:
        advanced = cycle_index + 1
        if advanced >= cycles_before_long_break:
            return PHASE_LONG_BREAK, advanced
        return PHASE_SHORT_BREAK, advanced
    if phase == PHASE_LONG_BREAK:
        return PHASE_WORK, 0
    return PHASE_WORK, cycle_index


def skip_target(ctx, from_phase: str) -> str:
    """Phase a skip (or completion) of `from_phase` would lead to, without mutating `ctx`."""
    target, _ = next_phase(
        from_phase,
        ctx.cycle_index,
        ctx.settings.cycles_before_long_break,
    )
    return target
