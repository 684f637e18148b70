"""
Prop runner.

Wires one prop binding to the display hub and the Room Controller bridge,
runs until SIGINT/SIGTERM, then shuts down in order: timers and devices,
offline announcement, sockets. Every shutdown step is time-bounded.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Callable

from .config.settings import Settings
from .core.events import Event
from .hardware.provider import DeviceFactory
from .network.hub import ConnectionHub
from .network.room_controller import RoomControllerBridge
from .props import PROPS, PropBinding

logger = logging.getLogger(__name__)


class PropRunner:
    """
    Runs one prop process.

    Attributes:
        binding: The prop wiring (machine or screen plus devices)
        hub: Display WebSocket server
        bridge: Room Controller client
    """

    def __init__(self, binding: PropBinding, settings: Settings) -> None:
        self.binding = binding
        self.settings = settings
        self.hub = ConnectionHub(
            greeting=binding.greeting,
            on_message=binding.handle_client,
            host=settings.server.host,
            port=binding.port,
            public_dir=settings.server.public_dir,
        )
        self.bridge = RoomControllerBridge(
            binding.prop_id,
            settings.room_controller,
            on_command=binding.handle_command,
            state_provider=binding.rc_state,
        )
        self._stop: asyncio.Event | None = None
        self._unsubscribes: list[Callable[[], None]] = []

        for bus in binding.buses():
            self.hub.attach(bus)
        for bus in (binding.component.events, binding.events):
            self._unsubscribes.append(bus.subscribe_all(self._on_event))

        logger.info(f"PropRunner created for {binding.name} ({binding.prop_id})")

    def _on_event(self, event: Event) -> None:
        if event.type in self.binding.RC_TRIGGERS:
            self.bridge.update_state(self.binding.rc_state())

    def request_stop(self) -> None:
        if self._stop is not None and not self._stop.is_set():
            logger.info("Shutting down...")
            self._stop.set()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop)
            except (NotImplementedError, RuntimeError) as e:
                logger.debug(f"Cannot install handler for {sig.name}: {e}")

    async def run(self) -> None:
        """Serve until stopped."""
        loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()
        self._install_signal_handlers(loop)

        await self.hub.start()
        await self.bridge.start()
        self.binding.start()
        if self.binding.devices.degraded:
            logger.warning(f"Running with simulated fallback for: {', '.join(self.binding.devices.degraded)}")
        logger.info(f"{self.binding.name} running (mock={self.binding.mock})")

        try:
            await self._stop.wait()
        finally:
            await self.shutdown()

    async def shutdown(self, timeout: float = 2.0) -> None:
        """Stop timers and devices, announce offline, close sockets."""
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()

        try:
            self.binding.close()
        except Exception as e:
            logger.warning(f"Error closing {self.binding.name}: {e}")

        try:
            await asyncio.wait_for(self.bridge.close(), timeout * 2)
        except asyncio.TimeoutError:
            logger.warning("Timed out closing the Room Controller link")

        try:
            await asyncio.wait_for(self.hub.stop(timeout), timeout * 2)
        except asyncio.TimeoutError:
            logger.warning("Timed out stopping the display server")
        logger.info(f"{self.binding.name} stopped")


def create_runner(prop: str, settings: Settings, mock: bool) -> PropRunner:
    """Build the binding for a prop name and wrap it in a runner."""
    binding_cls = PROPS[prop]
    devices = DeviceFactory(mock=mock)
    binding = binding_cls(settings, devices)
    return PropRunner(binding, settings)


async def run_prop(prop: str, settings: Settings, mock: bool) -> None:
    runner = create_runner(prop, settings, mock)
    await runner.run()
