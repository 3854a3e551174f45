"""Runtime exports."""

from .controller import WorkflowController
from .countdown import CountdownSnapshot, CountdownTimer
from .host import ButtonHost
from .ui import RuntimeUIPublisher

__all__ = [
    "ButtonHost",
    "CountdownSnapshot",
    "CountdownTimer",
    "RuntimeUIPublisher",
    "WorkflowController",
]
