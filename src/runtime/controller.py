"""Binds the workflow engine to concrete ports and the host lifecycle."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Mapping, Optional, Protocol

from pomodoro import (
    DEFAULT_SETTINGS,
    Workflow,
    WorkflowContext,
    WorkflowSettings,
    create_workflow_config,
    normalize_settings,
    seconds_for,
)
from pomodoro.constants import (
    COMPLETE_STATE_KEYS,
    EVENT_COMPLETE_ANIM_DONE,
    EVENT_DOUBLE_PRESS,
    EVENT_LONG_PRESS,
    EVENT_SHORT_PRESS,
    RUNNING_STATES,
    STATE_IDLE,
    STATE_PAUSED_IN_FLIGHT,
    STATE_PAUSED_NEXT,
)

from .countdown import CountdownTimer
from .messages import cycle_label


class ControllerDisplay(Protocol):
    def show_full(self, phase: str, total_seconds: int) -> None:
        ...

    def update_running(self, remaining: int, total: int, phase: str) -> None:
        ...

    def show_paused(self, remaining: int, total: int, phase: str) -> None:
        ...

    def set_visible(self, visible: bool) -> None:
        ...

    def restore_last_frame(self) -> None:
        ...


class ControllerEffects(Protocol):
    def show_completion_with_sound(self, kind: str, hold_ms: int, generation: int) -> Any:
        ...

    def show_reset_feedback(self) -> None:
        ...

    def close(self) -> None:
        ...


EffectsFactory = Callable[[Callable[[int], None]], ControllerEffects]


class _ControllerPorts:
    """Port bundle handed to the engine; port failures are logged, never raised."""

    def __init__(self, controller: "WorkflowController"):
        self._controller = controller

    def show_full(self, phase: str, total_seconds: int) -> None:
        display = self._controller._display
        self._call("show_full", display.show_full, phase, total_seconds)

    def update_running(self, remaining: int, total: int, phase: str) -> None:
        display = self._controller._display
        self._call("update_running", display.update_running, remaining, total, phase)

    def show_paused(self, remaining: int, total: int, phase: str) -> None:
        display = self._controller._display
        self._call("show_paused", display.show_paused, remaining, total, phase)

    def start_timer(
        self,
        phase: str,
        duration_seconds: int,
        on_done: Callable[[], None],
    ) -> None:
        controller = self._controller
        countdown = controller._countdown
        total = seconds_for(phase, controller.settings)
        run: dict[str, int] = {}

        def on_tick(remaining: int) -> None:
            # A tick computed just before a pause must not overwrite the paused frame.
            with controller._lock:
                if run.get("id") == countdown.last_run_id and countdown.is_running:
                    self.update_running(remaining, total, phase)

        def finished() -> None:
            controller._timer_finished(run.get("id"), on_done)

        run["id"] = self._call(
            "start_timer",
            countdown.start,
            phase,
            duration_seconds,
            on_done=finished,
            on_tick=on_tick,
        )

    def stop_timer(self) -> None:
        self._call("stop_timer", self._controller._countdown.stop)

    def timer_remaining(self) -> Optional[int]:
        return self._call("timer_remaining", self._controller._countdown.remaining_seconds)

    def show_completion_with_sound(self, kind: str, hold_ms: int) -> None:
        controller = self._controller
        generation = controller._next_completion_generation()
        self._call(
            "show_completion_with_sound",
            controller._effects.show_completion_with_sound,
            kind,
            hold_ms,
            generation,
        )

    def show_reset_feedback(self) -> None:
        # A reset leaves any completion in progress behind.
        self._controller._next_completion_generation()
        effects = self._controller._effects
        self._call("show_reset_feedback", effects.show_reset_feedback)

    def post(self, event_type: str) -> None:
        self._controller.post(event_type)

    def _call(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception as error:
            self._controller._logger.error(
                "[%s] Port call %s failed: %s",
                self._controller.instance_id,
                name,
                error,
                exc_info=True,
            )
            return None


class WorkflowController:
    """Owns one workflow instance and serializes every event it receives.

    Events posted while a dispatch is in progress (from ports, or from
    another thread) are queued and run, in order, before the outer dispatch
    returns, so the engine always sees one event at a time.
    """

    def __init__(
        self,
        instance_id: str,
        *,
        countdown: CountdownTimer,
        display: ControllerDisplay,
        effects_factory: EffectsFactory,
        default_settings: WorkflowSettings = DEFAULT_SETTINGS,
        logger: Optional[logging.Logger] = None,
    ):
        self.instance_id = instance_id
        self._countdown = countdown
        self._display = display
        self._effects = effects_factory(self._effects_finished)
        self._default_settings = default_settings
        self._settings = default_settings
        self._logger = logger or logging.getLogger("controller")
        self._ports = _ControllerPorts(self)
        self._workflow: Optional[Workflow] = None
        self._lock = threading.RLock()
        self._pending: deque[str] = deque()
        self._draining = False
        self._completion_generation = 0

    @property
    def settings(self) -> WorkflowSettings:
        with self._lock:
            if self._workflow is not None:
                return self._workflow.ctx.settings
            return self._settings

    @property
    def current_state(self) -> Optional[str]:
        with self._lock:
            return self._workflow.current if self._workflow is not None else None

    @property
    def context(self) -> Optional[WorkflowContext]:
        with self._lock:
            return self._workflow.ctx if self._workflow is not None else None

    def cycle_label(self) -> str:
        ctx = self.context
        if ctx is None:
            return cycle_label(0, self._settings.cycles_before_long_break)
        return cycle_label(ctx.cycle_index, ctx.settings.cycles_before_long_break)

    def appear(self, raw_settings: Optional[Mapping[str, Any]] = None) -> None:
        with self._lock:
            if raw_settings is not None:
                self._apply_settings(raw_settings)
            self._call_display("set_visible", True)

            if self._workflow is None:
                ctx = WorkflowContext(settings=self._settings)
                self._workflow = Workflow(
                    ctx,
                    self._ports,
                    create_workflow_config(),
                    initial=STATE_IDLE,
                    logger=logging.getLogger("workflow"),
                )
                self._logger.info("[%s] Appear: new workflow in %s", self.instance_id, STATE_IDLE)
                self._run_serialized(self._workflow.start)
                return

            state = self._resume_state()
            if state is None:
                self._logger.info(
                    "[%s] Appear: keeping %s until completion effects finish",
                    self.instance_id,
                    self._workflow.current,
                )
                return

            self._logger.info(
                "[%s] Appear: %s -> %s (cycle=%d)",
                self.instance_id,
                self._workflow.current,
                state,
                self._workflow.ctx.cycle_index,
            )
            workflow = self._workflow
            self._run_serialized(lambda: workflow.enter(state))

    def disappear(self) -> None:
        self._logger.info("[%s] Disappear", self.instance_id)
        self._call_display("set_visible", False)

    def dispose(self) -> None:
        with self._lock:
            self._logger.info("[%s] Dispose", self.instance_id)
            self._countdown.stop()
            self._effects.close()
            self._workflow = None
            self._pending.clear()

    def settings_changed(self, raw_settings: Optional[Mapping[str, Any]]) -> None:
        with self._lock:
            self._apply_settings(raw_settings)
            settings = self.settings
        self._logger.info(
            "[%s] Settings changed: cycles=%d pause_at_boundary=%s sound=%s",
            self.instance_id,
            settings.cycles_before_long_break,
            settings.pause_at_phase_boundary,
            settings.enable_sound,
        )

    def short_press(self, raw_settings: Optional[Mapping[str, Any]] = None) -> None:
        self._press(EVENT_SHORT_PRESS, raw_settings)

    def double_press(self, raw_settings: Optional[Mapping[str, Any]] = None) -> None:
        self._press(EVENT_DOUBLE_PRESS, raw_settings)

    def long_press(self, raw_settings: Optional[Mapping[str, Any]] = None) -> None:
        self._press(EVENT_LONG_PRESS, raw_settings)

    def post(self, event_type: str) -> None:
        """Queue `event_type` and run it once no other dispatch is in progress."""
        with self._lock:
            if self._workflow is None:
                self._logger.debug(
                    "[%s] Dropping %s: no active workflow",
                    self.instance_id,
                    event_type,
                )
                return
            self._pending.append(event_type)
            if self._draining:
                return
            self._drain()

    def _press(self, event_type: str, raw_settings: Optional[Mapping[str, Any]]) -> None:
        with self._lock:
            if self._workflow is None:
                self.appear(raw_settings)
            elif raw_settings is not None:
                self._apply_settings(raw_settings)
            self._logger.debug(
                "[%s] Input %s in %s",
                self.instance_id,
                event_type,
                self._workflow.current if self._workflow else None,
            )
            self.post(event_type)

    def _drain(self) -> None:
        self._draining = True
        try:
            while self._pending and self._workflow is not None:
                event_type = self._pending.popleft()
                self._workflow.dispatch(event_type)
        finally:
            self._draining = False
            if self._workflow is None:
                self._pending.clear()

    def _run_serialized(self, operation: Callable[[], None]) -> None:
        self._draining = True
        try:
            operation()
        finally:
            self._draining = False
        if self._pending:
            self._drain()

    def _resume_state(self) -> Optional[str]:
        workflow = self._workflow
        assert workflow is not None
        ctx = workflow.ctx
        current = workflow.current

        if current in COMPLETE_STATE_KEYS:
            return None

        live = self._countdown.snapshot()
        if live is not None:
            ctx.phase = live.phase
            ctx.remaining = live.remaining_seconds
            return RUNNING_STATES[live.phase]

        if ctx.remaining is not None:
            return STATE_PAUSED_IN_FLIGHT
        if current in (STATE_IDLE, STATE_PAUSED_NEXT):
            return current

        ctx.pending_next = ctx.phase
        ctx.running = False
        return STATE_PAUSED_NEXT

    def _apply_settings(self, raw_settings: Optional[Mapping[str, Any]]) -> None:
        settings = normalize_settings(raw_settings, defaults=self._default_settings)
        self._settings = settings
        if self._workflow is not None:
            self._workflow.ctx.settings = settings

    def _timer_finished(self, run_id: Optional[int], on_done: Callable[[], None]) -> None:
        with self._lock:
            if run_id is not None and run_id != self._countdown.last_run_id:
                self._logger.debug(
                    "[%s] Dropping completion of replaced countdown run=%s",
                    self.instance_id,
                    run_id,
                )
                return
            on_done()

    def _next_completion_generation(self) -> int:
        with self._lock:
            self._completion_generation += 1
            return self._completion_generation

    def _effects_finished(self, generation: int) -> None:
        with self._lock:
            current = (
                generation == self._completion_generation
                and self.current_state in COMPLETE_STATE_KEYS
            )
            if current:
                self.post(EVENT_COMPLETE_ANIM_DONE)
                return
            self._logger.debug(
                "[%s] Dropping finished completion generation=%d (current=%d)",
                self.instance_id,
                generation,
                self._completion_generation,
            )
            if self._workflow is not None:
                # The animation drew over the frame of the state that replaced it.
                self._call_display("restore_last_frame")

    def _call_display(self, name: str, *args: Any) -> None:
        method = getattr(self._display, name, None)
        if method is None:
            return
        try:
            method(*args)
        except Exception as error:
            self._logger.error(
                "[%s] Display %s failed: %s",
                self.instance_id,
                name,
                error,
                exc_info=True,
            )
