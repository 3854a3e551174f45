from .context import WorkflowContext, WorkflowPorts
from .durations import parse_duration_seconds, seconds_for
from .engine import StateNode, Transition, Workflow, WorkflowDefinitionError
from .guards import long_break_due, next_phase, pause_at_boundary
from .settings import DEFAULT_SETTINGS, WorkflowSettings, normalize_settings
from .workflow import create_workflow_config

__all__ = [
    "DEFAULT_SETTINGS",
    "StateNode",
    "Transition",
    "Workflow",
    "WorkflowContext",
    "WorkflowDefinitionError",
    "WorkflowPorts",
    "WorkflowSettings",
    "create_workflow_config",
    "long_break_due",
    "next_phase",
    "normalize_settings",
    "parse_duration_seconds",
    "pause_at_boundary",
    "seconds_for",
]
