"""Display port that turns workflow display calls into button frames."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from contracts.ui_protocol import (
    MODE_COMPLETION,
    MODE_FULL,
    MODE_PAUSED,
    MODE_RESET,
    MODE_RUNNING,
)
from pomodoro.constants import PHASE_LONG_BREAK, PHASE_SHORT_BREAK, PHASE_WORK

from .messages import format_time, status_message
from .ui import RuntimeUIPublisher

PHASE_COLORS = {
    PHASE_WORK: "#2196F3",
    PHASE_SHORT_BREAK: "#2E7D32",
    PHASE_LONG_BREAK: "#8BC34A",
}
PAUSE_BLINK_COLOR = "#F44336"
PAUSE_BLINK_INTERVAL_MS = 600
COMPLETION_RING_COLOR = "#FFFFFF"
COMPLETION_TITLE = "Done"
RESET_FLASH_COLOR = "#FFFFFF"


class ButtonDisplay:
    """Publishes frames for one button instance; silent while the instance is hidden."""

    def __init__(
        self,
        instance_id: str,
        ui: RuntimeUIPublisher,
        *,
        cycle_label: Optional[Callable[[], str]] = None,
    ):
        self._instance_id = instance_id
        self._ui = ui
        self._cycle_label = cycle_label
        self._visible = True
        self._lock = threading.Lock()
        self._last_frame: Optional[tuple[str, dict]] = None

    @property
    def visible(self) -> bool:
        with self._lock:
            return self._visible

    def set_visible(self, visible: bool) -> None:
        with self._lock:
            self._visible = visible

    def set_cycle_label(self, cycle_label: Optional[Callable[[], str]]) -> None:
        self._cycle_label = cycle_label

    def show_full(self, phase: str, total_seconds: int) -> None:
        self._publish(
            MODE_FULL,
            phase=phase,
            remaining_seconds=total_seconds,
            total_seconds=total_seconds,
            title=format_time(total_seconds),
            color=PHASE_COLORS.get(phase),
        )

    def update_running(self, remaining: int, total: int, phase: str) -> None:
        self._publish(
            MODE_RUNNING,
            phase=phase,
            remaining_seconds=remaining,
            total_seconds=total,
            title=format_time(remaining),
            color=PHASE_COLORS.get(phase),
        )

    def show_paused(self, remaining: int, total: int, phase: str) -> None:
        self._publish(
            MODE_PAUSED,
            phase=phase,
            remaining_seconds=remaining,
            total_seconds=total,
            title=format_time(remaining),
            color=PHASE_COLORS.get(phase),
            blink_color=PAUSE_BLINK_COLOR,
            blink_interval_ms=PAUSE_BLINK_INTERVAL_MS,
        )

    def show_completion_frame(self, kind: str, angle_deg: int) -> None:
        self._publish(
            MODE_COMPLETION,
            title=COMPLETION_TITLE,
            color=COMPLETION_RING_COLOR,
            kind=kind,
            angle=angle_deg,
        )

    def show_reset_frame(self, flash_on: bool) -> None:
        self._publish(
            MODE_RESET,
            color=RESET_FLASH_COLOR if flash_on else None,
            flash=flash_on,
        )

    def restore_last_frame(self) -> None:
        """Re-publish the last countdown frame after a transient animation."""
        with self._lock:
            frame = self._last_frame
        if frame is not None:
            mode, payload = frame
            self._publish(mode, **payload)

    def _publish(self, mode: str, **payload) -> None:
        if mode in (MODE_FULL, MODE_RUNNING, MODE_PAUSED):
            with self._lock:
                self._last_frame = (mode, dict(payload))
        if not self.visible:
            return
        phase = payload.get("phase")
        if phase is not None:
            payload["message"] = status_message(
                mode,
                phase,
                payload.get("remaining_seconds") or 0,
            )
        if self._cycle_label is not None:
            payload["cycle"] = self._cycle_label()
        self._ui.publish_button(self._instance_id, mode=mode, **payload)
