"""Generic table-driven state machine interpreter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence

from .context import WorkflowContext, WorkflowPorts

ActionFn = Callable[[WorkflowContext, WorkflowPorts], None]
GuardFn = Callable[[WorkflowContext], bool]

MAX_ALWAYS_HOPS = 32


class WorkflowDefinitionError(Exception):
    """Raised when a state table is inconsistent or never settles."""


@dataclass(frozen=True)
class Transition:
    """Guarded edge; a `None` target runs the actions without leaving the state."""
    target: Optional[str]
    guard: Optional[GuardFn] = None
    actions: tuple[ActionFn, ...] = ()

    def allows(self, ctx: WorkflowContext) -> bool:
        return self.guard is None or bool(self.guard(ctx))


@dataclass(frozen=True)
class StateNode:
    """Entry actions, event transitions, and follow-on transitions of a state."""
    on_enter: tuple[ActionFn, ...] = ()
    on: Mapping[str, Sequence[Transition]] = field(default_factory=dict)
    always: tuple[Transition, ...] = ()


MachineConfig = Mapping[str, StateNode]


def validate_config(config: MachineConfig) -> None:
    """Check that every transition target names a state of `config`."""
    for state_key, node in config.items():
        edges = [*node.always]
        for transitions in node.on.values():
            edges.extend(transitions)
        for transition in edges:
            if transition.target is not None and transition.target not in config:
                raise WorkflowDefinitionError(
                    f"State {state_key!r} targets unknown state {transition.target!r}"
                )


class Workflow:
    """Runs a state table against a context and a set of ports.

    `dispatch` is synchronous: the transition, the entry actions of the new
    state, and any follow-on transitions all complete before it returns.
    Callers serialize access; the engine holds no lock of its own.
    """

    def __init__(
        self,
        ctx: WorkflowContext,
        ports: WorkflowPorts,
        config: MachineConfig,
        *,
        initial: str,
        logger: Optional[logging.Logger] = None,
    ):
        validate_config(config)
        if initial not in config:
            raise WorkflowDefinitionError(f"Unknown initial state: {initial!r}")

        self.ctx = ctx
        self._ports = ports
        self._config = config
        self._state = initial
        self._logger = logger or logging.getLogger("workflow")

    @property
    def current(self) -> str:
        return self._state

    def start(self) -> None:
        """Enter the current state as if it had just been reached."""
        self._logger.debug("Workflow start: state=%s", self._state)
        self._run_actions(self._config[self._state].on_enter)
        self._run_always()

    def enter(self, state: str) -> None:
        """Jump to `state` and run its entry actions (used for state restores)."""
        if state not in self._config:
            raise WorkflowDefinitionError(f"Unknown state: {state!r}")
        self._transition_to(state)
        self._run_always()

    def dispatch(self, event_type: str) -> bool:
        """Apply `event_type`; returns False when no transition matched."""
        node = self._config[self._state]
        for transition in node.on.get(event_type, ()):
            if not transition.allows(self.ctx):
                continue

            self._logger.debug(
                "Workflow %s: %s -> %s",
                event_type,
                self._state,
                transition.target or self._state,
            )
            self._run_actions(transition.actions)
            if transition.target is not None:
                self._transition_to(transition.target)
            self._run_always()
            return True

        self._logger.debug("Workflow ignored %s in state %s", event_type, self._state)
        return False

    def _transition_to(self, target: str) -> None:
        self._state = target
        self._run_actions(self._config[target].on_enter)

    def _run_always(self) -> None:
        for _ in range(MAX_ALWAYS_HOPS):
            node = self._config[self._state]
            for transition in node.always:
                if transition.allows(self.ctx):
                    self._logger.debug(
                        "Workflow always: %s -> %s",
                        self._state,
                        transition.target or self._state,
                    )
                    self._run_actions(transition.actions)
                    if transition.target is not None:
                        self._transition_to(transition.target)
                    break
            else:
                return
        raise WorkflowDefinitionError(
            f"Follow-on transitions did not settle after {MAX_ALWAYS_HOPS} hops "
            f"(state={self._state!r})"
        )

    def _run_actions(self, actions: Sequence[ActionFn]) -> None:
        for action in actions:
            action(self.ctx, self._ports)
