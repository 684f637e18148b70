"""
Connection Hub: the display WebSocket server.

Serves a WebSocket on /ws (and on / for clients that upgrade the root URL),
plus an optional directory of browser assets. Every connecting client gets
the config manifest and a full state snapshot first, then every event the
prop emits. Each client has its own outbound queue and writer task, so
messages reach a client in emission order and a stalled client cannot hold
up the others.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

from aiohttp import WSMsgType, web

from .protocol import encode, parse_message
from ..core.events import Event, EventBus

logger = logging.getLogger(__name__)

Message = dict[str, Any]
MessageHandler = Callable[[Message], Iterable[Message] | None]


@dataclass(eq=False)
class ClientConnection:
    """One display client and its ordered outbound queue."""

    ws: web.WebSocketResponse
    queue: asyncio.Queue[str]
    remote: str = "?"
    task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def open(self) -> bool:
        return not self.ws.closed


class ConnectionHub:
    """Broadcast hub for display and GM clients."""

    def __init__(
        self,
        greeting: Callable[[], list[Message]],
        on_message: MessageHandler,
        host: str = "0.0.0.0",
        port: int = 3000,
        public_dir: Path | None = None,
        queue_size: int = 256,
    ) -> None:
        self.host = host
        self.port = port
        self.public_dir = Path(public_dir) if public_dir else None
        self._greeting = greeting
        self._on_message = on_message
        self._queue_size = queue_size
        self._clients: set[ClientConnection] = set()
        self._unsubscribes: list[Callable[[], None]] = []
        self._runner: web.AppRunner | None = None

        self.app = web.Application()
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Setup HTTP routes."""
        self.app.router.add_get("/ws", self._handle_ws)
        self.app.router.add_get("/", self._handle_root)
        if self.public_dir is not None:
            if self.public_dir.is_dir():
                self.app.router.add_static("/", self.public_dir)
            else:
                logger.warning(f"Public directory {self.public_dir} not found - static files disabled")

    @property
    def client_count(self) -> int:
        return len(self._clients)

    # -- event wiring ---------------------------------------------------

    def attach(self, bus: EventBus) -> None:
        """Broadcast every event of a bus."""
        self._unsubscribes.append(bus.subscribe_all(self._on_event))

    def _on_event(self, event: Event) -> None:
        self.broadcast(event.to_message())

    # -- sending --------------------------------------------------------

    def broadcast(self, message: Message) -> None:
        """Queue a message for every live client."""
        if not self._clients:
            return
        text = encode(message)
        for client in list(self._clients):
            self._enqueue(client, text)

    def send(self, client: ClientConnection, message: Message) -> None:
        self._enqueue(client, encode(message))

    def _enqueue(self, client: ClientConnection, text: str) -> None:
        try:
            client.queue.put_nowait(text)
        except asyncio.QueueFull:
            logger.warning(f"[ws] Client {client.remote} is not keeping up, dropping it")
            self._drop(client)

    async def _writer(self, client: ClientConnection) -> None:
        while True:
            text = await client.queue.get()
            try:
                await client.ws.send_str(text)
            except Exception as e:
                logger.debug(f"[ws] Send to {client.remote} failed: {e}")
                self._drop(client)
                return

    def _drop(self, client: ClientConnection) -> None:
        if client not in self._clients:
            return
        self._clients.discard(client)
        if client.task is not None and client.task is not asyncio.current_task():
            client.task.cancel()
        if client.open:
            asyncio.ensure_future(client.ws.close())
        logger.info(f"[ws] Client disconnected ({len(self._clients)} total)")

    # -- handlers -------------------------------------------------------

    async def _handle_root(self, request: web.Request) -> web.StreamResponse:
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return await self._handle_ws(request)
        if self.public_dir is not None:
            index = self.public_dir / "index.html"
            if index.exists():
                return web.FileResponse(index)
        return web.Response(text="Not found", status=404)

    async def _handle_ws(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse(heartbeat=30.0)
        await ws.prepare(request)

        client = ClientConnection(ws=ws, queue=asyncio.Queue(maxsize=self._queue_size), remote=request.remote or "?")
        # Greeting is queued before the client joins the broadcast set
        for message in self._greeting():
            self.send(client, message)
        self._clients.add(client)
        client.task = asyncio.create_task(self._writer(client))
        logger.info(f"[ws] Client connected ({len(self._clients)} total)")

        try:
            async for msg in ws:
                if msg.type == WSMsgType.TEXT:
                    self._dispatch(client, msg.data)
                elif msg.type == WSMsgType.ERROR:
                    logger.warning(f"[ws] Connection error: {ws.exception()}")
        finally:
            self._drop(client)
        return ws

    def _dispatch(self, client: ClientConnection, raw: str) -> None:
        message = parse_message(raw)
        if message is None:
            return
        try:
            replies = self._on_message(message)
        except Exception as e:
            logger.error(f"[ws] Error handling {message.get('type')!r}: {e}", exc_info=True)
            return
        for reply in replies or ():
            self.send(client, reply)

    # -- lifecycle ------------------------------------------------------

    async def start(self) -> None:
        """Start the web server."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"[server] http://{self.host}:{self.port}")

    async def stop(self, timeout: float = 2.0) -> None:
        """Close every client and stop the web server."""
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()

        clients = list(self._clients)
        for client in clients:
            self._clients.discard(client)
            if client.task is not None:
                client.task.cancel()
        closes = [client.ws.close() for client in clients if client.open]
        if closes:
            try:
                await asyncio.wait_for(asyncio.gather(*closes, return_exceptions=True), timeout)
            except asyncio.TimeoutError:
                logger.warning("[ws] Timed out closing clients")

        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("[server] Stopped")
