"""
Prop bindings.

A binding is everything one prop process needs beyond the generic runner:
it builds the devices and the machine (or screen), describes the config
manifest sent to displays, routes display messages and Room Controller
commands, and projects state for the Room Controller.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Iterable

from ..config.hardware import HardwareConfig, get_hardware_config
from ..config.settings import Settings
from ..core.events import HACK_MODE, HACK_RESOLVED, STATE, Event, EventBus
from ..core.state import PuzzleMachine
from ..core.timers import Scheduler
from ..errors import CommandError
from ..hardware.base import Device
from ..hardware.provider import DeviceFactory
from ..network import protocol

logger = logging.getLogger(__name__)

Message = dict[str, Any]
ClientHandler = Callable[[Message], Iterable[Message] | None]
CommandHandler = Callable[[Message], None]


def require(payload: Message, key: str) -> Any:
    """Fetch a mandatory command argument."""
    value = payload.get(key)
    if value in (None, ""):
        raise CommandError(f"Missing {key}")
    return value


class PropBinding(ABC):
    """Wiring of one prop process."""

    name: ClassVar[str] = "prop"

    # Event kinds that trigger a prop_update to the Room Controller
    RC_TRIGGERS: ClassVar[frozenset[str]] = frozenset({STATE})

    def __init__(
        self,
        settings: Settings,
        devices: DeviceFactory,
        hardware: HardwareConfig | None = None,
        loop: Scheduler | None = None,
    ) -> None:
        self.settings = settings
        self.loop = loop
        self.devices = devices
        self.hardware = hardware or get_hardware_config()
        self.mock = devices.mock
        self.events = EventBus()
        self._owned: list[Device] = []
        self._client_handlers: dict[str, ClientHandler] = {}
        self._mock_handlers: dict[str, ClientHandler] = {}
        self._commands: dict[str, CommandHandler] = {}

    # -- identity -------------------------------------------------------

    @property
    @abstractmethod
    def section(self) -> Any:
        """The prop's settings model (has http_port and prop_id)."""

    @property
    def port(self) -> int:
        return self.section.http_port

    @property
    def prop_id(self) -> str:
        return self.section.prop_id

    @property
    @abstractmethod
    def component(self) -> Any:
        """The machine or screen controller."""

    # -- registration ---------------------------------------------------

    def own(self, device: Device) -> Any:
        """Track a device for close() and return it."""
        self._owned.append(device)
        return device

    def client(self, kind: str, handler: ClientHandler, mock_only: bool = False) -> None:
        (self._mock_handlers if mock_only else self._client_handlers)[kind] = handler

    def command(self, name: str, handler: CommandHandler) -> None:
        self._commands[name] = handler

    def broadcast(self, kind: str, **data: Any) -> None:
        """Send a binding-level event to displays."""
        self.events.emit(Event(kind, data=data, source=self.name))

    # -- outward views --------------------------------------------------

    def buses(self) -> list[EventBus]:
        """Every bus whose events reach the displays."""
        buses = [self.events, self.component.events]
        buses.extend(d.events for d in self._owned if isinstance(getattr(d, "events", None), EventBus))
        return buses

    def manifest(self) -> dict[str, Any]:
        """Static parameters sent in the config message."""
        return {}

    def config_message(self) -> Message:
        return {"type": "config", "mock": self.mock, **self.manifest()}

    def get_state(self) -> dict[str, Any]:
        return self.component.get_state()

    def greeting(self) -> list[Message]:
        """Messages a newly connected display receives: config, then state."""
        return [self.config_message(), {"type": STATE, **self.get_state()}]

    @abstractmethod
    def rc_state(self) -> dict[str, Any]:
        """Projection reported to the Room Controller."""

    # -- inbound --------------------------------------------------------

    def handle_client(self, message: Message) -> Iterable[Message] | None:
        """Route one display message. Unknown types are dropped."""
        kind = message.get("type")
        handler = self._client_handlers.get(kind)
        if handler is None:
            handler = self._mock_handlers.get(kind)
            if handler is not None and not self.mock:
                logger.debug(f"[{self.name}] Ignoring simulated input {kind!r} outside mock mode")
                return None
        if handler is None:
            logger.debug(f"[{self.name}] Ignoring message type {kind!r}")
            return None
        return handler(message)

    def handle_command(self, payload: Message) -> None:
        """Run one Room Controller command; raises CommandError if it cannot."""
        name = payload.get("command")
        handler = self._commands.get(name)
        if handler is None:
            raise CommandError("Unknown command")
        handler(payload)

    # -- lifecycle ------------------------------------------------------

    def start(self) -> None:
        """Called once the hub and bridge are up."""

    def close(self) -> None:
        self.component.close()
        for device in reversed(self._owned):
            try:
                device.close()
            except Exception as e:
                logger.warning(f"[{self.name}] Error closing {type(device).__name__}: {e}")
        self._owned.clear()


class PuzzleBinding(PropBinding):
    """
    Binding for a puzzle machine.

    Adds the shared GM controls and Room Controller commands and tracks hack
    mode: a puzzle solved while the hack is engaged broadcasts hackResolved
    and reports it to the Room Controller.
    """

    # Hack mode also starts an inactive puzzle
    ACTIVATE_ON_HACK: ClassVar[bool] = False

    def __init__(
        self,
        settings: Settings,
        devices: DeviceFactory,
        hardware: HardwareConfig | None = None,
        loop: Scheduler | None = None,
    ) -> None:
        super().__init__(settings, devices, hardware, loop)
        self.hack_engaged = False
        self.hack_was_resolved = False
        self.machine = self.build()
        self.machine.on(STATE, self._on_machine_state)

        self.client(protocol.ACTIVATE, lambda m: self.activate())
        self.client(protocol.RESET, lambda m: self.reset())
        self.client(protocol.FORCE_SOLVE, lambda m: self.force_solve())
        self.client(protocol.READY, self._on_ready)

        self.command("force_solve", lambda p: self.force_solve())
        self.command("reset", lambda p: self.reset())
        self.command("activate", lambda p: self.activate())
        self.command("hack_mode", lambda p: self.hack_mode())
        self.command("hack_resolved", lambda p: self.hack_resolved())

    @abstractmethod
    def build(self) -> PuzzleMachine:
        """Create devices and the machine, and connect device callbacks."""

    @property
    def component(self) -> PuzzleMachine:
        return self.machine

    # -- operations -----------------------------------------------------

    def activate(self) -> None:
        self.machine.activate()

    def reset(self) -> None:
        self.hack_engaged = False
        self.hack_was_resolved = False
        self.machine.reset()

    def force_solve(self) -> None:
        self.machine.force_solve()

    def hack_mode(self) -> None:
        logger.info(f"[{self.name}] Hack mode")
        self.hack_engaged = True
        self.hack_was_resolved = False
        self.broadcast(HACK_MODE)
        if self.ACTIVATE_ON_HACK and self.machine.state is self.machine.State.INACTIVE:
            self.activate()

    def hack_resolved(self) -> None:
        self.hack_engaged = False
        self.broadcast(HACK_RESOLVED)

    def _on_ready(self, message: Message) -> None:
        if self.mock and self.machine.state is self.machine.State.INACTIVE:
            logger.info(f"[{self.name}] Client ready, auto-activating puzzle")
            self.activate()

    def _on_machine_state(self, event: Event) -> None:
        if self.machine.is_solved and self.hack_engaged:
            logger.info(f"[{self.name}] Solved during hack - resolving")
            self.hack_engaged = False
            self.hack_was_resolved = True
            self.broadcast(HACK_RESOLVED)

    def rc_state(self) -> dict[str, Any]:
        update = {"state": self.machine.state.value, "progress": self.machine.progress()}
        if self.hack_was_resolved:
            update["hackResolved"] = True
        return update
