from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional, Protocol
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from .config import (
    CLIENTS_PATH,
    HEALTHZ_PATH,
    INDEX_PATH,
    ROOT_PATH,
    STATS_PATH,
    UIServerConfig,
)
from .events import Event
from .hub import BroadcastHub, Subscriber


class UIBackend(Protocol):
    """State-side collaborator the server calls into for each connection."""

    def snapshot_events(self) -> list[Event]:
        ...

    def handle_message(self, message: str) -> Optional[Event]:
        ...

    def stats_document(self) -> dict[str, Any]:
        ...


class UIServer:
    """Threaded asyncio server for the UI page + websocket event streams."""

    def __init__(
        self,
        config: UIServerConfig,
        backend: UIBackend,
        logger: Optional[logging.Logger] = None,
        hub: Optional[BroadcastHub] = None,
    ):
        self._config = config
        self._backend = backend
        self._logger = logger or logging.getLogger("ui_server")
        self._hub = hub or BroadcastHub(logger=logging.getLogger("hub"))
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._outbound: Optional[asyncio.Queue[Event]] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._connected_clients: set[ServerConnection] = set()
        self._index_html = Path(self._config.index_file).read_bytes()

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
    def hub(self) -> BroadcastHub:
        return self._hub

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

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
        self._outbound = None

    def publish_event(self, event: Event) -> None:
        """Queue ``event`` for fan-out; safe to call from any thread, never blocks."""
        loop = self._loop
        outbound = self._outbound
        if not self.is_running or loop is None or outbound is None:
            return

        try:
            loop.call_soon_threadsafe(outbound.put_nowait, event)
        except RuntimeError:
            # Loop may be shutting down.
            return

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()
        self._outbound = asyncio.Queue()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - exercised manually
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            if self._loop is not None:
                pending = asyncio.all_tasks(self._loop)
                for task in pending:
                    task.cancel()
                with contextlib.suppress(Exception):
                    self._loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )
                self._loop.close()

    async def _serve(self) -> None:
        dispatcher = asyncio.create_task(self._dispatch_outbound())
        try:
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
                self._hub.close_all()
        finally:
            dispatcher.cancel()
            await asyncio.gather(dispatcher, return_exceptions=True)

    async def _dispatch_outbound(self) -> None:
        # Single drain task: events reach every subscriber in submission order.
        outbound = self._outbound
        while True:
            event = await outbound.get()
            self._hub.publish(event)

    async def _handler(self, websocket: ServerConnection) -> None:
        request_path = (
            urlsplit(websocket.request.path).path
            if websocket.request is not None
            else ""
        )
        if request_path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        await self.serve_connection(websocket)

    async def serve_connection(self, websocket: Any) -> None:
        """Run one subscription: register, replay the snapshot, stream, deregister."""
        subscriber = Subscriber(
            capacity=self._config.subscriber_queue_size,
            name=str(websocket.remote_address),
        )
        self._connected_clients.add(websocket)
        self._hub.register(subscriber)
        for event in self._backend.snapshot_events():
            subscriber.offer(event)

        pump = asyncio.create_task(self._pump(websocket, subscriber))
        try:
            async for message in websocket:
                text = message if isinstance(message, str) else message.decode("utf-8", "replace")
                reply = self._backend.handle_message(text)
                if reply is not None and not subscriber.offer(reply):
                    break
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            pump.cancel()
            await asyncio.gather(pump, return_exceptions=True)
            self._hub.unregister(subscriber)
            self._connected_clients.discard(websocket)

    async def _pump(self, websocket: Any, subscriber: Subscriber) -> None:
        while True:
            event = await subscriber.receive()
            if event is None:
                break
            try:
                await websocket.send(event.text())
            except websockets.exceptions.ConnectionClosed:
                return
            except Exception as error:
                self._logger.warning(
                    "Send to %s failed: %s", subscriber.name, error, exc_info=True
                )
                self._hub.unregister(subscriber)
                await websocket.close(code=1011, reason="Send failed")
                return

        # Evicted by the hub; the client reconnects and receives a fresh snapshot.
        await websocket.close(code=1013, reason="Subscriber queue overflow")

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection  # Unused in static routing.
        path = urlsplit(request.path).path

        if path == self._config.websocket_path:
            return None

        if path in (ROOT_PATH, INDEX_PATH):
            return self._response(
                200,
                "OK",
                self._index_html,
                "text/html; charset=utf-8",
            )

        if path == HEALTHZ_PATH:
            return self._response(
                200,
                "OK",
                b"ok\n",
                "text/plain; charset=utf-8",
            )

        if path == CLIENTS_PATH:
            return self._response(
                200,
                "OK",
                f"Clients: {self._hub.subscriber_count}\n".encode("utf-8"),
                "text/plain; charset=utf-8",
            )

        if path == STATS_PATH:
            return self._response(
                200,
                "OK",
                json.dumps(self._backend.stats_document()).encode("utf-8"),
                "application/json",
            )

        return self._response(
            404,
            "Not Found",
            b"not found\n",
            "text/plain; charset=utf-8",
        )

    def _response(
        self,
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
        if not self._connected_clients:
            return

        tasks = [
            client.close(code=1001, reason="Server shutting down")
            for client in tuple(self._connected_clients)
        ]
        await asyncio.gather(*tasks, return_exceptions=True)
        self._connected_clients.clear()
