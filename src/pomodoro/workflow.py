"""Pomodoro workflow definition: states, entry actions, and guarded transitions."""

from __future__ import annotations

from typing import Callable

from .constants import (
    COMPLETE_STATES,
    EFFECT_BREAK,
    EFFECT_WORK,
    EVENT_COMPLETE_ANIM_DONE,
    EVENT_DOUBLE_PRESS,
    EVENT_LONG_PRESS,
    EVENT_SHORT_PRESS,
    EVENT_TIMER_DONE,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
    PHASES,
    RUNNING_STATES,
    STATE_IDLE,
    STATE_PAUSED_IN_FLIGHT,
    STATE_PAUSED_NEXT,
)
from .context import WorkflowContext, WorkflowPorts
from .durations import seconds_for
from .engine import ActionFn, GuardFn, MachineConfig, StateNode, Transition
from .guards import next_phase, pause_at_boundary, skip_target

PhaseSource = Callable[[WorkflowContext], str]


# Actions


def set_phase(phase: str) -> ActionFn:
    def action(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
        ctx.phase = phase

    return action


def show_full_for(phase: str) -> ActionFn:
    def action(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
        ports.show_full(phase, seconds_for(phase, ctx.settings))

    return action


def enter_idle(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    ctx.phase = PHASE_WORK
    ctx.running = False
    ctx.remaining = None
    ctx.pending_next = None
    ctx.completion_done = False


def start_countdown(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    """Start the current phase, from the paused snapshot when there is one."""
    if ctx.remaining is not None:
        duration = max(0, ctx.remaining)
    else:
        duration = seconds_for(ctx.phase, ctx.settings)
    ctx.remaining = None
    ctx.pending_next = None
    ctx.running = True
    ports.start_timer(ctx.phase, duration, lambda: ports.post(EVENT_TIMER_DONE))


def stop_countdown(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    ctx.running = False
    ports.stop_timer()


def capture_remaining(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    live = ports.timer_remaining()
    if live is None:
        live = ctx.remaining if ctx.remaining is not None else seconds_for(ctx.phase, ctx.settings)
    ctx.remaining = max(0, int(live))


def show_paused_now(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    total = seconds_for(ctx.phase, ctx.settings)
    remaining = ctx.remaining if ctx.remaining is not None else total
    ports.show_paused(max(0, remaining), total, ctx.phase)


def show_pending(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    upcoming = ctx.pending_next or PHASE_WORK
    ctx.pending_next = upcoming
    ctx.running = False
    ports.show_full(upcoming, seconds_for(upcoming, ctx.settings))


def reset_cycle(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    ctx.cycle_index = 0


def reset_feedback(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    ports.show_reset_feedback()


def advance_from(source: PhaseSource) -> ActionFn:
    """Record the phase following `source(ctx)` as pending and update the cycle count."""

    def action(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
        upcoming, cycle_index = next_phase(
            source(ctx),
            ctx.cycle_index,
            ctx.settings.cycles_before_long_break,
        )
        ctx.pending_next = upcoming
        ctx.cycle_index = cycle_index
        ctx.remaining = None

    return action


def begin_completion(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    ctx.completion_done = False


def play_completion(kind: str) -> ActionFn:
    def action(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
        ports.show_completion_with_sound(kind, ctx.settings.completion_hold_ms)

    return action


def mark_completion_done(ctx: WorkflowContext, ports: WorkflowPorts) -> None:
    ctx.completion_done = True


# Phase sources and guards


def current_phase(ctx: WorkflowContext) -> str:
    return ctx.phase


def pending_phase(ctx: WorkflowContext) -> str:
    return ctx.pending_next or PHASE_WORK


def phase_is(phase: str) -> GuardFn:
    return lambda ctx: ctx.phase == phase


def pending_is(phase: str) -> GuardFn:
    return lambda ctx: pending_phase(ctx) == phase


def skips_to(source: PhaseSource, phase: str) -> GuardFn:
    return lambda ctx: skip_target(ctx, source(ctx)) == phase


def completion_done_and(guard: GuardFn) -> GuardFn:
    return lambda ctx: ctx.completion_done and guard(ctx)


# Transition builders

_RESET = Transition(
    target=STATE_IDLE,
    actions=(stop_countdown, reset_cycle, reset_feedback),
)


def _skip_transitions(source: PhaseSource, *actions: ActionFn) -> tuple[Transition, ...]:
    """Advance past `source(ctx)`; wait at the boundary or run the next phase at once."""
    actions = (*actions, advance_from(source))
    return (
        Transition(target=STATE_PAUSED_NEXT, guard=pause_at_boundary, actions=actions),
        *(
            Transition(
                target=RUNNING_STATES[phase],
                guard=skips_to(source, phase),
                actions=actions,
            )
            for phase in PHASES
        ),
    )


def _running_node(phase: str) -> StateNode:
    on_enter: tuple[ActionFn, ...] = (set_phase(phase),)
    if phase == PHASE_LONG_BREAK:
        on_enter += (reset_cycle,)
    return StateNode(
        on_enter=(*on_enter, start_countdown),
        on={
            EVENT_SHORT_PRESS: (
                Transition(
                    target=STATE_PAUSED_IN_FLIGHT,
                    actions=(capture_remaining, stop_countdown),
                ),
            ),
            EVENT_DOUBLE_PRESS: _skip_transitions(current_phase, stop_countdown),
            EVENT_TIMER_DONE: (Transition(target=COMPLETE_STATES[phase]),),
            EVENT_LONG_PRESS: (_RESET,),
        },
    )


def _complete_node(phase: str) -> StateNode:
    kind = EFFECT_WORK if phase == PHASE_WORK else EFFECT_BREAK
    return StateNode(
        on_enter=(
            stop_countdown,
            begin_completion,
            advance_from(current_phase),
            play_completion(kind),
        ),
        on={
            EVENT_COMPLETE_ANIM_DONE: (
                Transition(target=None, actions=(mark_completion_done,)),
            ),
            EVENT_LONG_PRESS: (_RESET,),
        },
        always=(
            Transition(
                target=STATE_PAUSED_NEXT,
                guard=completion_done_and(pause_at_boundary),
            ),
            *(
                Transition(
                    target=RUNNING_STATES[upcoming],
                    guard=completion_done_and(pending_is(upcoming)),
                )
                for upcoming in PHASES
            ),
        ),
    )


def create_workflow_config() -> MachineConfig:
    """Build the nine-state Pomodoro workflow table."""
    return {
        STATE_IDLE: StateNode(
            on_enter=(enter_idle, show_full_for(PHASE_WORK)),
            on={
                EVENT_SHORT_PRESS: (Transition(target=RUNNING_STATES[PHASE_WORK]),),
                EVENT_LONG_PRESS: (_RESET,),
            },
        ),
        RUNNING_STATES[PHASE_WORK]: _running_node(PHASE_WORK),
        RUNNING_STATES[PHASE_SHORT_BREAK]: _running_node(PHASE_SHORT_BREAK),
        RUNNING_STATES[PHASE_LONG_BREAK]: _running_node(PHASE_LONG_BREAK),
        STATE_PAUSED_IN_FLIGHT: StateNode(
            on_enter=(show_paused_now,),
            on={
                EVENT_SHORT_PRESS: tuple(
                    Transition(target=RUNNING_STATES[phase], guard=phase_is(phase))
                    for phase in PHASES
                ),
                EVENT_DOUBLE_PRESS: _skip_transitions(current_phase, stop_countdown),
                EVENT_LONG_PRESS: (_RESET,),
            },
        ),
        COMPLETE_STATES[PHASE_WORK]: _complete_node(PHASE_WORK),
        COMPLETE_STATES[PHASE_SHORT_BREAK]: _complete_node(PHASE_SHORT_BREAK),
        COMPLETE_STATES[PHASE_LONG_BREAK]: _complete_node(PHASE_LONG_BREAK),
        STATE_PAUSED_NEXT: StateNode(
            on_enter=(show_pending,),
            on={
                EVENT_SHORT_PRESS: tuple(
                    Transition(target=RUNNING_STATES[phase], guard=pending_is(phase))
                    for phase in PHASES
                ),
                EVENT_DOUBLE_PRESS: _skip_transitions(pending_phase),
                EVENT_LONG_PRESS: (_RESET,),
            },
        ),
    }
