"""Phase, state, event, and default-setting constants for the button workflow."""

from __future__ import annotations

from typing import Literal

Phase = Literal["work", "shortBreak", "longBreak"]
EffectKind = Literal["work", "break"]
EventType = Literal[
    "SHORT_PRESS",
    "DOUBLE_PRESS",
    "LONG_PRESS",
    "TIMER_DONE",
    "COMPLETE_ANIM_DONE",
]
StateKey = Literal[
    "idle",
    "workRunning",
    "shortBreakRunning",
    "longBreakRunning",
    "pausedInFlight",
    "workComplete",
    "shortBreakComplete",
    "longBreakComplete",
    "pausedNext",
]

PHASE_WORK = "work"
PHASE_SHORT_BREAK = "shortBreak"
PHASE_LONG_BREAK = "longBreak"

PHASES: tuple[str, ...] = (PHASE_WORK, PHASE_SHORT_BREAK, PHASE_LONG_BREAK)

EFFECT_WORK = "work"
EFFECT_BREAK = "break"

EVENT_SHORT_PRESS = "SHORT_PRESS"
EVENT_DOUBLE_PRESS = "DOUBLE_PRESS"
EVENT_LONG_PRESS = "LONG_PRESS"
EVENT_TIMER_DONE = "TIMER_DONE"
EVENT_COMPLETE_ANIM_DONE = "COMPLETE_ANIM_DONE"

STATE_IDLE = "idle"
STATE_WORK_RUNNING = "workRunning"
STATE_SHORT_BREAK_RUNNING = "shortBreakRunning"
STATE_LONG_BREAK_RUNNING = "longBreakRunning"
STATE_PAUSED_IN_FLIGHT = "pausedInFlight"
STATE_WORK_COMPLETE = "workComplete"
STATE_SHORT_BREAK_COMPLETE = "shortBreakComplete"
STATE_LONG_BREAK_COMPLETE = "longBreakComplete"
STATE_PAUSED_NEXT = "pausedNext"

RUNNING_STATES: dict[str, str] = {
    PHASE_WORK: STATE_WORK_RUNNING,
    PHASE_SHORT_BREAK: STATE_SHORT_BREAK_RUNNING,
    PHASE_LONG_BREAK: STATE_LONG_BREAK_RUNNING,
}
COMPLETE_STATES: dict[str, str] = {
    PHASE_WORK: STATE_WORK_COMPLETE,
    PHASE_SHORT_BREAK: STATE_SHORT_BREAK_COMPLETE,
    PHASE_LONG_BREAK: STATE_LONG_BREAK_COMPLETE,
}

RUNNING_STATE_KEYS: frozenset[str] = frozenset(RUNNING_STATES.values())
COMPLETE_STATE_KEYS: frozenset[str] = frozenset(COMPLETE_STATES.values())

DEFAULT_WORK_DURATION = "25:00"
DEFAULT_SHORT_BREAK_DURATION = "05:00"
DEFAULT_LONG_BREAK_DURATION = "10:00"
DEFAULT_CYCLES_BEFORE_LONG_BREAK = 4
DEFAULT_PAUSE_AT_PHASE_BOUNDARY = True
DEFAULT_ENABLE_SOUND = False
DEFAULT_COMPLETION_HOLD_SECONDS = 3.0
