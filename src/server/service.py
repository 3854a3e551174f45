from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import (
    CLIENT_APPEAR,
    CLIENT_DISAPPEAR,
    DEFAULT_INSTANCE_ID,
    EVENT_HELLO,
    EVENT_STATE_UPDATE,
    STATE_IDLE,
)

from .config import HEALTHZ_PATH, INDEX_PATH, ROOT_PATH, UIServerConfig
from .events import StickyEventStore, make_event
from .static_files import guess_content_type, resolve_static_file

MessageHandler = Callable[[dict[str, Any]], None]

_TEXT_PLAIN = "text/plain; charset=utf-8"
_TEXT_HTML = "text/html; charset=utf-8"


class UIServer:
    """Serves the button UI and relays events between buttons and browser clients.

    Runs an asyncio loop on its own thread. Frames published from runtime
    threads are broadcast to every client; client messages are decoded and
    handed to `on_message` off the loop, in order per connection. When the
    last client showing an instance goes away, a `disappear` message is
    dispatched for it so the instance stops publishing frames.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        *,
        on_message: Optional[MessageHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._on_message = on_message
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._viewers: dict[ServerConnection, set[str]] = {}
        self._sticky_events = StickyEventStore()
        index_html = Path(self._config.index_file).read_bytes()
        self._routes: dict[str, tuple[bytes, str]] = {
            ROOT_PATH: (index_html, _TEXT_HTML),
            INDEX_PATH: (index_html, _TEXT_HTML),
            HEALTHZ_PATH: (b"ok\n", _TEXT_PLAIN),
        }

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def set_message_handler(self, on_message: Optional[MessageHandler]) -> None:
        self._on_message = on_message

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="ui-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(
                f"UI server did not start within {timeout_seconds:.1f}s"
            )
        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "UI server thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish_state(self, state: str, *, message: Optional[str] = None, **payload) -> None:
        event_payload = {"state": state, **payload}
        if message:
            event_payload["message"] = message
        self.publish(EVENT_STATE_UPDATE, **event_payload)

    def publish(self, event_type: str, **payload) -> None:
        """Broadcast an event; sticky ones are kept for clients connecting later."""
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message, payload.get("instance"))

        loop = self._loop
        if not self.is_running or loop is None:
            return
        try:
            future = asyncio.run_coroutine_threadsafe(self._broadcast(message), loop)
        except RuntimeError:
            # Loop is shutting down.
            return
        future.add_done_callback(self._consume_future_exception)

    @staticmethod
    def _consume_future_exception(future) -> None:
        with contextlib.suppress(Exception):
            future.result()

    def _run_loop(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._stop_async = asyncio.Event()

        try:
            loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - exercised manually
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            with contextlib.suppress(Exception):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server running at http://%s:%d (websocket: %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._started.set()
            await self._stop_async.wait()
            await self._close_clients()

    async def _handler(self, websocket: ServerConnection) -> None:
        request_path = (
            urlsplit(websocket.request.path).path
            if websocket.request is not None
            else ""
        )
        if request_path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._viewers[websocket] = set()
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(
                make_event(EVENT_HELLO, state=STATE_IDLE, message="UI websocket connected")
            )
            for sticky in self._sticky_events.snapshot():
                await websocket.send(sticky)

            async for raw in websocket:
                payload = self._decode_client_message(raw)
                if payload is None:
                    continue
                self._track_viewer(websocket, payload)
                await asyncio.to_thread(self._dispatch_client_message, payload)
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            abandoned = self._drop_viewer(websocket)
            for instance_id in sorted(abandoned):
                await asyncio.to_thread(
                    self._dispatch_client_message,
                    {"type": CLIENT_DISAPPEAR, "instance": instance_id},
                )

    def _decode_client_message(self, raw: str | bytes) -> Optional[dict[str, Any]]:
        self._logger.debug("Received from UI: %s", raw)
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as error:
            self._logger.warning("Ignoring malformed UI message: %s", error)
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("type"), str):
            self._logger.warning("Ignoring UI message without a type: %r", payload)
            return None
        return payload

    def _track_viewer(self, websocket: ServerConnection, payload: dict[str, Any]) -> None:
        shown = self._viewers.get(websocket)
        if shown is None:
            return
        instance_id = str(payload.get("instance") or DEFAULT_INSTANCE_ID)
        if payload["type"] == CLIENT_APPEAR:
            shown.add(instance_id)
        elif payload["type"] == CLIENT_DISAPPEAR:
            shown.discard(instance_id)

    def _drop_viewer(self, websocket: ServerConnection) -> set[str]:
        """Forget a connection; return instances no remaining client shows."""
        shown = self._viewers.pop(websocket, set())
        still_shown = set().union(*self._viewers.values())
        return shown - still_shown

    def _dispatch_client_message(self, payload: dict[str, Any]) -> None:
        handler = self._on_message
        if handler is None:
            return
        try:
            handler(payload)
        except Exception as error:
            self._logger.error(
                "UI message handler failed for %s: %s",
                payload.get("type"),
                error,
                exc_info=True,
            )

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None

        route = self._routes.get(path)
        if route is not None:
            body, content_type = route
            return self._response(200, "OK", body, content_type)

        static_file = resolve_static_file(self._config.ui_root, path)
        if static_file is not None:
            return self._response(
                200,
                "OK",
                static_file.read_bytes(),
                guess_content_type(static_file),
            )
        return self._response(404, "Not Found", b"not found\n", _TEXT_PLAIN)

    @staticmethod
    def _response(
        status_code: int,
        reason_phrase: str,
        body: bytes,
        content_type: str,
    ) -> Response:
        headers = Headers()
        headers["Content-Type"] = content_type
        headers["Content-Length"] = str(len(body))
        headers["Cache-Control"] = "no-store"
        return Response(status_code, reason_phrase, headers, body)

    async def _close_clients(self) -> None:
        clients = tuple(self._viewers)
        if not clients:
            return
        await asyncio.gather(
            *(client.close(code=1001, reason="Server shutting down") for client in clients),
            return_exceptions=True,
        )
        self._viewers.clear()

    async def _broadcast(self, message: str) -> None:
        clients = tuple(self._viewers)
        if not clients:
            return

        results = await asyncio.gather(
            *(client.send(message) for client in clients),
            return_exceptions=True,
        )
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                self._logger.warning("Failed to send message to client: %s", result)
