"""
Room Controller Bridge.

A single outbound WebSocket to the Room Controller. It announces the prop
online, pushes state updates (best effort, dropped while disconnected),
answers every command with exactly one acknowledgement, and reconnects with
exponential backoff until the prop shuts down.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable

import aiohttp

from . import protocol
from ..config.settings import RoomControllerSettings
from ..errors import CommandError

logger = logging.getLogger(__name__)

CommandHandler = Callable[[dict[str, Any]], None]


def backoff_delays(initial: float, factor: float, maximum: float):
    """Reconnect delays: initial, then multiplied by factor up to maximum."""
    delay = initial
    while True:
        yield delay
        delay = min(delay * factor, maximum)


class RoomControllerBridge:
    """Reconnecting Room Controller client for one prop."""

    def __init__(
        self,
        prop_id: str,
        settings: RoomControllerSettings,
        on_command: CommandHandler,
        state_provider: Callable[[], dict[str, Any]] | None = None,
    ) -> None:
        self.prop_id = prop_id
        self.settings = settings
        self.url = settings.url
        self._on_command = on_command
        self._state_provider = state_provider

        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._outbox: asyncio.Queue[str] | None = None
        self._task: asyncio.Task | None = None
        self._closing = False
        self._stop_event: asyncio.Event | None = None
        self.connect_attempts = 0

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    # -- lifecycle ------------------------------------------------------

    async def start(self) -> None:
        if not self.enabled:
            logger.info("[rc] No Room Controller URL configured, skipping connection")
            return
        if self._task is not None:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run())

    async def close(self) -> None:
        """Announce offline, stop reconnecting and close, bounded by close_timeout."""
        self._closing = True
        if self._stop_event is not None:
            self._stop_event.set()

        timeout = self.settings.close_timeout
        ws = self._ws
        if ws is not None and not ws.closed:
            try:
                await asyncio.wait_for(ws.send_str(protocol.encode(protocol.prop_offline(self.prop_id))), timeout)
                await asyncio.wait_for(ws.close(), timeout)
            except Exception as e:
                logger.warning(f"[rc] Offline announcement failed: {e}")

        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError, asyncio.TimeoutError):
                await asyncio.wait_for(self._task, timeout)
            self._task = None
        logger.info("[rc] Disconnected from Room Controller")

    async def _run(self) -> None:
        delays = backoff_delays(
            self.settings.reconnect_initial,
            self.settings.reconnect_factor,
            self.settings.reconnect_max,
        )
        async with aiohttp.ClientSession() as session:
            while not self._closing:
                self.connect_attempts += 1
                logger.info(f"[rc] Connecting to Room Controller at {self.url}")
                try:
                    async with session.ws_connect(self.url, heartbeat=30.0) as ws:
                        # Successful connect resets the backoff
                        delays = backoff_delays(
                            self.settings.reconnect_initial,
                            self.settings.reconnect_factor,
                            self.settings.reconnect_max,
                        )
                        await self._session(ws)
                    logger.info("[rc] Disconnected from Room Controller")
                except asyncio.CancelledError:
                    raise
                except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
                    logger.warning(f"[rc] Connection failed: {e}")

                if self._closing:
                    break
                delay = next(delays)
                logger.info(f"[rc] Reconnecting in {delay:.1f}s")
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(self._stop_event.wait(), delay)

    async def _session(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        self._ws = ws
        self._outbox = asyncio.Queue()
        writer = asyncio.create_task(self._writer(ws, self._outbox))
        periodic = asyncio.create_task(self._periodic_updates())
        logger.info("[rc] Connected to Room Controller")
        self._send(protocol.prop_online(self.prop_id))
        self._push_state()
        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self.handle_message(msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.warning(f"[rc] WebSocket error: {ws.exception()}")
        finally:
            self._ws = None
            self._outbox = None
            periodic.cancel()
            writer.cancel()

    async def _writer(self, ws: aiohttp.ClientWebSocketResponse, outbox: asyncio.Queue[str]) -> None:
        while True:
            text = await outbox.get()
            try:
                await ws.send_str(text)
            except Exception as e:
                logger.warning(f"[rc] Send failed: {e}")
                return

    async def _periodic_updates(self) -> None:
        interval = self.settings.update_interval
        if interval <= 0:
            return
        while True:
            await asyncio.sleep(interval)
            self._push_state()

    # -- outbound -------------------------------------------------------

    def _send(self, message: dict[str, Any]) -> bool:
        """Queue a message; dropped when not connected."""
        if self._outbox is None or not self.connected:
            return False
        self._outbox.put_nowait(protocol.encode(message))
        return True

    def _push_state(self) -> None:
        if self._state_provider is not None:
            self.update_state(self._state_provider())

    def update_state(self, changes: dict[str, Any]) -> bool:
        """Fire-and-forget prop_update."""
        return self._send(protocol.prop_update(self.prop_id, changes))

    def send_ack(self, request_id: Any, success: bool, error: str | None = None) -> bool:
        if not request_id:
            return False
        return self._send(protocol.cmd_ack(request_id, success, error))

    # -- inbound --------------------------------------------------------

    def handle_message(self, raw: str) -> None:
        message = protocol.parse_message(raw)
        if message is None:
            return

        kind = message["type"]
        if kind == protocol.HELLO:
            logger.info("[rc] Received hello from Room Controller")
            return
        if kind != protocol.CMD:
            return

        payload = message.get("payload")
        if not isinstance(payload, dict):
            return
        target = payload.get("propId")
        if target and target != self.prop_id:
            return
        self.execute(payload)

    def execute(self, payload: dict[str, Any]) -> None:
        """Run one command and acknowledge it exactly once."""
        command = payload.get("command")
        request_id = payload.get("requestId")
        logger.info(f"[rc] Executing command: {command}")
        try:
            self._on_command(payload)
        except CommandError as e:
            logger.info(f"[rc] Command {command!r} rejected: {e}")
            self.send_ack(request_id, False, str(e))
        except Exception as e:
            logger.error(f"[rc] Command {command!r} failed: {e}", exc_info=True)
            self.send_ack(request_id, False, str(e))
        else:
            self.send_ack(request_id, True)
