"""
Device provider: picks GPIO drivers or simulated devices once at startup.

GPIO availability is probed a single time. With --mock, or when the probe
fails, every surface is simulated. When the probe succeeds but one device
cannot claim its pins, only that surface falls back to its simulated twin
and the prop keeps running.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, TypeVar

from .base import (
    Beeper,
    ButtonPanel,
    Device,
    EncoderPair,
    Joystick,
    Keypad,
    LedBank,
    LeverBank,
    NavigationButtons,
)
from ..config.hardware import (
    EncoderPins,
    JoystickPins,
    VehiclePins,
    WiegandPins,
)
from ..errors import HardwareError
from ..simulator.mock_hardware import (
    SimulatedBeeper,
    SimulatedButtonPanel,
    SimulatedEncoders,
    SimulatedJoystick,
    SimulatedKeypad,
    SimulatedLedBank,
    SimulatedLevers,
    SimulatedNavigation,
)

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=Device)


def probe_gpio() -> bool:
    """Check that gpiozero is importable and a pin factory can be created."""
    try:
        from gpiozero import Device as GpioDevice

        if GpioDevice.pin_factory is None:
            GpioDevice.pin_factory = GpioDevice._default_pin_factory()
    except ImportError:
        logger.warning("gpiozero not available - using simulated I/O")
        return False
    except Exception as e:
        logger.warning(f"GPIO probe failed: {e} - using simulated I/O")
        return False
    logger.info(f"GPIO available ({type(GpioDevice.pin_factory).__name__})")
    return True


class DeviceFactory:
    """
    Builds the input sources and output sinks of one prop.

    Attributes:
        mock: Simulated devices were requested explicitly
        gpio: GPIO drivers are in use
        degraded: Surfaces that fell back to simulation after a failure
    """

    def __init__(
        self,
        mock: bool,
        gpio: bool | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.mock = mock
        if gpio is None:
            gpio = False if mock else probe_gpio()
        self.gpio = gpio and not mock
        self.degraded: list[str] = []
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _build(
        self,
        label: str,
        real: Callable[[], D],
        fallback: Callable[[], D],
        enabled: bool | None = None,
    ) -> D:
        if enabled is None:
            enabled = self.gpio
        if not enabled:
            return fallback()
        try:
            return real()
        except Exception as e:
            error = e if isinstance(e, HardwareError) else HardwareError(f"{label}: {e}")
            logger.warning(f"{error} - falling back to simulated {label}")
            self.degraded.append(label)
            return fallback()

    def buttons(self, pins: dict[int, int], bounce_time: float = 0.05) -> ButtonPanel:
        from .gpio import GpioButtonPanel

        return self._build(
            "buttons",
            lambda: GpioButtonPanel(pins, bounce_time=bounce_time, loop=self.loop),
            lambda: SimulatedButtonPanel(list(pins)),
        )

    def leds(self, pins: dict[int, int], id_field: str = "buttonId") -> LedBank:
        from .gpio import GpioLedBank

        return self._build(
            "leds",
            lambda: GpioLedBank(pins),
            lambda: SimulatedLedBank(list(pins), id_field=id_field),
        )

    def encoders(self, pins: EncoderPins) -> EncoderPair:
        from .gpio import GpioEncoderPair

        return self._build(
            "encoders",
            lambda: GpioEncoderPair(pins.x, pins.y, loop=self.loop),
            SimulatedEncoders,
        )

    def beeper(self, frequency: int, duration_ms: int) -> Beeper:
        from .audio import PygameBeeper

        # Audio does not depend on GPIO, only on not being in mock mode
        return self._build(
            "beeper",
            lambda: PygameBeeper(frequency, duration_ms),
            SimulatedBeeper,
            enabled=not self.mock,
        )

    def keypad(self, pins: WiegandPins) -> Keypad:
        from .gpio import GpioWiegandKeypad

        return self._build(
            "keypad",
            lambda: GpioWiegandKeypad(pins.d0, pins.d1, frame_gap=pins.frame_gap, loop=self.loop),
            SimulatedKeypad,
        )

    def levers(self, pins: VehiclePins, count: int, positions: int, poll_interval: float) -> LeverBank:
        from .gpio import GpioLeverBank

        return self._build(
            "levers",
            lambda: GpioLeverBank(pins.levers[:count], poll_interval=poll_interval, loop=self.loop),
            lambda: SimulatedLevers(count, positions),
        )

    def navigation(self, pins: VehiclePins) -> NavigationButtons:
        from .gpio import GpioNavigationButtons

        return self._build(
            "navigation",
            lambda: GpioNavigationButtons(
                pins.left, pins.right, pins.validate, bounce_time=pins.bounce_time, loop=self.loop
            ),
            SimulatedNavigation,
        )

    def joystick(self, pins: JoystickPins) -> Joystick:
        from .gpio import GpioJoystick

        switch_pins = {"up": pins.up, "down": pins.down, "left": pins.left, "right": pins.right}
        return self._build(
            "joystick",
            lambda: GpioJoystick(
                switch_pins, bounce_time=pins.bounce_time, settle_time=pins.settle_time, loop=self.loop
            ),
            SimulatedJoystick,
        )
