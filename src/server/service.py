from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from http import HTTPStatus
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection, broadcast
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import (
    EVENT_ERROR,
    EVENT_HELLO,
    EVENT_STATE_UPDATE,
    STATE_ERROR,
    STATE_IDLE,
)

from .config import HEALTHZ_PATH, INDEX_PATH, ROOT_PATH, UIServerConfig
from .events import CommandParseError, StickyEventStore, make_event, parse_command
from .static_files import guess_content_type, resolve_static_file

CommandHandler = Callable[[str], None]

_TEXT_PLAIN = "text/plain; charset=utf-8"
_TEXT_HTML = "text/html; charset=utf-8"


def _http_response(status: HTTPStatus, body: bytes, content_type: str) -> Response:
    headers = Headers()
    headers["Content-Type"] = content_type
    headers["Content-Length"] = str(len(body))
    headers["Cache-Control"] = "no-store"
    return Response(status.value, status.phrase, headers, body)


class UIServer:
    """Serves the routine page over HTTP and streams routine events over a websocket.

    The asyncio loop runs on its own daemon thread. `publish()` may be called
    from any thread; messages are handed to the loop and fanned out to every
    connected client. The latest sticky events are replayed to clients that
    connect mid-routine.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        command_handler: Optional[CommandHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._command_handler = command_handler
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()
        index_html = Path(self._config.index_file).read_bytes()
        self._fixed_routes: dict[str, tuple[bytes, str]] = {
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
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def set_command_handler(self, handler: Optional[CommandHandler]) -> None:
        self._command_handler = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._ready.clear()
        self._thread = threading.Thread(
            target=self._thread_main,
            daemon=True,
            name="ui-server",
        )
        self._thread.start()

        if not self._ready.wait(timeout_seconds):
            raise RuntimeError(f"UI server did not start within {timeout_seconds:.1f}s")
        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop is not None and self._shutdown is not None:
            self._loop.call_soon_threadsafe(self._shutdown.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error("UI server thread did not stop within %.1fs", timeout_seconds)

        self._thread = None
        self._loop = None
        self._shutdown = None

    def publish_state(self, state: str, *, message: Optional[str] = None, **payload) -> None:
        event_payload = {"state": state, **payload}
        if message:
            event_payload["message"] = message
        if state != STATE_ERROR:
            # Clients joining after recovery should not see the old error.
            self._sticky_events.forget(EVENT_ERROR)
        self.publish(EVENT_STATE_UPDATE, **event_payload)

    def publish(self, event_type: str, **payload) -> None:
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)

        loop = self._loop
        if not self.is_running or loop is None:
            return
        try:
            loop.call_soon_threadsafe(self._fan_out, message)
        except RuntimeError:
            # Loop closed between the check and the call.
            self._logger.debug("Dropped %s event: UI loop is closed", event_type)

    def _fan_out(self, message: str) -> None:
        if self._clients:
            broadcast(self._clients, message)

    def _thread_main(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._shutdown = asyncio.Event()

        try:
            loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - exercised manually
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._ready.set()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handle_connection,
            host=self._config.host,
            port=self._config.port,
            process_request=self._route_http,
            logger=self._logger,
        ) as server:
            self._logger.info(
                "UI server running at http://%s:%d (websocket: %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._ready.set()
            await self._shutdown.wait()
            server.close(close_connections=True)
            await server.wait_closed()
            self._clients.clear()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        self._clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(
                make_event(EVENT_HELLO, state=STATE_IDLE, message="UI websocket connected")
            )
            for sticky in self._sticky_events.snapshot():
                await websocket.send(sticky)
            async for raw in websocket:
                await self._handle_client_message(websocket, raw)
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            self._clients.discard(websocket)
            self._logger.info("Client disconnected: %s", websocket.remote_address)

    async def _handle_client_message(
        self,
        websocket: ServerConnection,
        raw: str | bytes,
    ) -> None:
        try:
            action = parse_command(raw)
        except CommandParseError as error:
            self._logger.warning("Rejected UI message: %s", error)
            await websocket.send(make_event(EVENT_ERROR, message=str(error)))
            return

        self._logger.debug("UI command: %s", action)
        if self._command_handler is None:
            self._logger.warning("No command handler registered; dropping '%s'", action)
            return
        self._command_handler(action)

    async def _route_http(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection
        path = urlsplit(request.path).path

        if path == self._config.websocket_path:
            return None
        fixed = self._fixed_routes.get(path)
        if fixed is not None:
            body, content_type = fixed
            return _http_response(HTTPStatus.OK, body, content_type)

        static_file = resolve_static_file(self._config.ui_root, path)
        if static_file is not None:
            return _http_response(
                HTTPStatus.OK,
                static_file.read_bytes(),
                guess_content_type(static_file),
            )
        return _http_response(HTTPStatus.NOT_FOUND, b"not found\n", _TEXT_PLAIN)
