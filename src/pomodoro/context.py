"""Mutable runtime context and the port protocol the workflow drives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from .constants import PHASE_WORK
from .settings import DEFAULT_SETTINGS, WorkflowSettings


@dataclass
class WorkflowContext:
    """Per-instance runtime state mutated only by workflow actions."""
    phase: str = PHASE_WORK
    cycle_index: int = 0
    running: bool = False
    remaining: Optional[int] = None
    pending_next: Optional[str] = None
    settings: WorkflowSettings = field(default=DEFAULT_SETTINGS)
    completion_done: bool = False


class DisplayPort(Protocol):
    def show_full(self, phase: str, total_seconds: int) -> None:
        ...

    def update_running(self, remaining: int, total: int, phase: str) -> None:
        ...

    def show_paused(self, remaining: int, total: int, phase: str) -> None:
        ...


class TimerPort(Protocol):
    def start_timer(
        self,
        phase: str,
        duration_seconds: int,
        on_done: Callable[[], None],
    ) -> None:
        ...

    def stop_timer(self) -> None:
        ...

    def timer_remaining(self) -> Optional[int]:
        ...


class EffectsPort(Protocol):
    def show_completion_with_sound(self, kind: str, hold_ms: int) -> None:
        ...

    def show_reset_feedback(self) -> None:
        ...


class WorkflowPorts(DisplayPort, TimerPort, EffectsPort, Protocol):
    """Complete capability set supplied to the engine by a controller."""

    def post(self, event_type: str) -> None:
        """Queue an event back into the workflow that owns these ports."""
        ...
