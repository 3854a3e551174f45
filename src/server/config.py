"""Validated settings for the button web UI server."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path


class ServerConfigurationError(Exception):
    """Raised when UI server configuration is invalid."""


WEBSOCKET_PATH = "/ws"
ROOT_PATH = "/"
INDEX_PATH = "/index.html"
HEALTHZ_PATH = "/healthz"
DEFAULT_UI = "button"
_BUILTIN_UIS = {
    "button": Path("web_ui") / "button" / "index.html",
}


def builtin_index_file(ui: str) -> Path:
    """Index file of a UI shipped with the application (or its frozen bundle)."""
    _check_ui(ui)
    base_dir = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parents[2]))
    return base_dir / _BUILTIN_UIS[ui]


def _check_ui(ui: str) -> None:
    if ui not in _BUILTIN_UIS:
        allowed = ", ".join(sorted(_BUILTIN_UIS))
        raise ServerConfigurationError(f"ui_server.ui must be one of: {allowed}")


def _check_index_file(index_file: str) -> None:
    if not index_file:
        raise ServerConfigurationError("ui_server.index_file cannot be empty")
    index_path = Path(index_file)
    if not index_path.exists():
        raise ServerConfigurationError(f"UI index file not found: {index_path}")
    if not index_path.is_file():
        raise ServerConfigurationError(f"UI index path is not a file: {index_path}")


@dataclass(frozen=True)
class UIServerConfig:
    """Where to listen and which button UI to serve."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    ui: str = DEFAULT_UI
    index_file: str = ""

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")
        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [1, 65535], got: {self.port}"
            )
        _check_ui(self.ui)
        # A disabled server never reads the index.
        if self.enabled:
            _check_index_file(self.index_file)

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @property
    def ui_root(self) -> Path:
        """Directory holding the index file and the assets it loads."""
        return Path(self.index_file).resolve().parent

    @classmethod
    def from_settings(cls, settings) -> "UIServerConfig":
        ui = (getattr(settings, "ui", "") or DEFAULT_UI).strip().lower()
        index_file = (settings.index_file or "").strip()
        if not index_file:
            index_file = str(builtin_index_file(ui))
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            ui=ui,
            index_file=index_file,
        )
