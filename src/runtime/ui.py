from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_BUTTON


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        if self._ui_server:
            self._ui_server.publish_state(state, message=message, **payload)

    def publish_button(
        self,
        instance_id: str,
        *,
        mode: str,
        phase: Optional[str] = None,
        remaining_seconds: Optional[int] = None,
        total_seconds: Optional[int] = None,
        title: str = "",
        color: Optional[str] = None,
        message: Optional[str] = None,
        **extra: Any,
    ) -> None:
        payload: dict[str, Any] = {"instance": instance_id, "mode": mode}
        if phase is not None:
            payload["phase"] = phase
        if remaining_seconds is not None:
            payload["remaining_seconds"] = remaining_seconds
        if total_seconds is not None:
            payload["total_seconds"] = total_seconds
            payload["progress"] = (
                round(remaining_seconds / total_seconds, 4)
                if remaining_seconds is not None and total_seconds > 0
                else 0.0
            )
        if title:
            payload["title"] = title
        if color:
            payload["color"] = color
        if message:
            payload["message"] = message
        payload.update(extra)
        self.publish(EVENT_BUTTON, **payload)
