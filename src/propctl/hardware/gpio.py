"""
gpiozero drivers for prop I/O.

gpiozero fires callbacks on its own background thread. Every callback is
handed to the asyncio loop with call_soon_threadsafe() so puzzle state is
only ever touched on the loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from .base import (
    ButtonPanel,
    CallbackList,
    EncoderPair,
    Joystick,
    Keypad,
    LedBank,
    LeverBank,
    NavigationButtons,
)
from .joystick import DirectionSampler
from .wiegand import WiegandDecoder
from ..core.timers import TimerSet

logger = logging.getLogger(__name__)


def _close_all(devices: list[Any]) -> None:
    for device in devices:
        try:
            device.close()
        except Exception as e:
            logger.warning(f"Error releasing GPIO device: {e}")


class _LoopBound:
    """Base for drivers that marshal gpiozero callbacks onto the loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._devices: list[Any] = []

    def _threadsafe(self, fn: Callable[..., None], *args: Any) -> Callable[[], None]:
        def handler() -> None:
            self._loop.call_soon_threadsafe(fn, *args)
        return handler

    def close(self) -> None:
        _close_all(self._devices)
        self._devices.clear()


class GpioButtonPanel(_LoopBound, ButtonPanel):
    """Buttons wired active LOW with internal pull-ups."""

    def __init__(
        self,
        pins: dict[int, int],
        pull_up: bool = True,
        bounce_time: float = 0.05,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(loop)
        from gpiozero import Button

        self._presses = CallbackList("button")
        try:
            for button_id, pin in pins.items():
                button = Button(pin, pull_up=pull_up, bounce_time=bounce_time)
                button.when_pressed = self._threadsafe(self._presses.fire, button_id)
                self._devices.append(button)
        except Exception:
            self.close()
            raise
        logger.info(f"GPIO buttons initialized: {len(pins)} buttons")

    def on_press(self, callback: Callable[[int], None]) -> Callable[[], None]:
        return self._presses.add(callback)


class GpioLedBank(LedBank):
    """LEDs on output pins."""

    def __init__(self, pins: dict[int, int]) -> None:
        from gpiozero import LED

        self._leds: dict[int, Any] = {}
        self._state: dict[int, bool] = {}
        try:
            for led_id, pin in pins.items():
                led = LED(pin)
                led.off()
                self._leds[led_id] = led
                self._state[led_id] = False
        except Exception:
            _close_all(list(self._leds.values()))
            raise
        logger.info(f"GPIO LEDs initialized on pins {list(pins.values())}")

    @property
    def ids(self) -> list[int]:
        return list(self._leds)

    def set(self, led_id: int, on: bool) -> None:
        led = self._leds.get(led_id)
        if led is None:
            return
        if on:
            led.on()
        else:
            led.off()
        self._state[led_id] = on

    def states(self) -> list[bool]:
        return [self._state[led_id] for led_id in self._leds]

    def close(self) -> None:
        for led in self._leds.values():
            led.off()
        _close_all(list(self._leds.values()))
        self._leds.clear()


class GpioEncoderPair(_LoopBound, EncoderPair):
    """Two quadrature encoders (CLK, DT)."""

    def __init__(
        self,
        x_pins: tuple[int, int],
        y_pins: tuple[int, int],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(loop)
        from gpiozero import RotaryEncoder

        self._turns = CallbackList("encoder")
        try:
            for axis, (clk, dt) in (("x", x_pins), ("y", y_pins)):
                encoder = RotaryEncoder(clk, dt, max_steps=0)
                encoder.when_rotated_clockwise = self._threadsafe(self._turns.fire, axis, 1)
                encoder.when_rotated_counter_clockwise = self._threadsafe(self._turns.fire, axis, -1)
                self._devices.append(encoder)
        except Exception:
            self.close()
            raise
        logger.info(f"GPIO encoders initialized (X={x_pins}, Y={y_pins})")

    def on_turn(self, callback: Callable[[str, int], None]) -> Callable[[], None]:
        return self._turns.add(callback)


class GpioWiegandKeypad(_LoopBound, Keypad):
    """Wiegand keypad on D0/D1; frames are decoded on the loop."""

    def __init__(
        self,
        d0: int,
        d1: int,
        frame_gap: float = 0.05,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(loop)
        from gpiozero import DigitalInputDevice

        self._keys = CallbackList("keypad")
        self._decoder = WiegandDecoder(self._keys.fire, frame_gap=frame_gap, loop=self._loop)
        try:
            for bit, pin in ((0, d0), (1, d1)):
                line = DigitalInputDevice(pin, pull_up=True)
                line.when_activated = self._threadsafe(self._decoder.pulse, bit)
                self._devices.append(line)
        except Exception:
            self.close()
            raise
        logger.info(f"Wiegand keypad initialized (D0={d0}, D1={d1})")

    def on_key(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self._keys.add(callback)

    def close(self) -> None:
        self._decoder.close()
        super().close()


class GpioLeverBank(LeverBank):
    """
    Rotary cam switches read by polling.

    Each wired position pulls its pin LOW when selected. Only positions used
    by a vehicle code are wired, so other stops read as None.
    """

    def __init__(
        self,
        lever_pins: tuple[dict[int, int], ...],
        poll_interval: float = 0.1,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        from gpiozero import Button

        self._switches: list[dict[int, Any]] = []
        self._changes = CallbackList("lever")
        self._last: list[int | None] = [None] * len(lever_pins)
        self._timers = TimerSet(loop or asyncio.get_running_loop(), owner="levers")
        try:
            for index, positions in enumerate(lever_pins):
                switches = {}
                for position, pin in positions.items():
                    switches[position] = Button(pin, pull_up=True)
                    logger.debug(f"Lever {index + 1} position {position} -> GPIO {pin}")
                self._switches.append(switches)
        except Exception:
            self.close()
            raise
        self._timers.schedule_repeating("poll", poll_interval, self._poll)
        logger.info(f"GPIO levers initialized: {len(lever_pins)} levers")

    def on_change(self, callback: Callable[[list[int | None]], None]) -> Callable[[], None]:
        return self._changes.add(callback)

    def positions(self) -> list[int | None]:
        return list(self._last)

    def read_position(self, index: int) -> int | None:
        for position, switch in self._switches[index].items():
            if switch.is_pressed:
                return position
        return None

    def _poll(self) -> None:
        current = [self.read_position(i) for i in range(len(self._switches))]
        if current != self._last:
            logger.debug(f"Levers changed: {self._last} -> {current}")
            self._last = current
            self._changes.fire(self.positions())

    def close(self) -> None:
        self._timers.cancel_all()
        for switches in self._switches:
            _close_all(list(switches.values()))
        self._switches.clear()


class GpioNavigationButtons(_LoopBound, NavigationButtons):
    """Left/right/validate buttons."""

    def __init__(
        self,
        left: int,
        right: int,
        validate: int,
        bounce_time: float = 0.05,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(loop)
        from gpiozero import Button

        self._navigate = CallbackList("navigate")
        self._validate = CallbackList("validate")
        try:
            for pin, handler in (
                (left, self._threadsafe(self._navigate.fire, "left")),
                (right, self._threadsafe(self._navigate.fire, "right")),
                (validate, self._threadsafe(self._validate.fire)),
            ):
                button = Button(pin, pull_up=True, bounce_time=bounce_time)
                button.when_pressed = handler
                self._devices.append(button)
        except Exception:
            self.close()
            raise
        logger.info("GPIO navigation buttons initialized")

    def on_navigate(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self._navigate.add(callback)

    def on_validate(self, callback: Callable[[], None]) -> Callable[[], None]:
        return self._validate.add(callback)


class GpioJoystick(_LoopBound, Joystick):
    """Four microswitches sampled into 8 directions."""

    def __init__(
        self,
        pins: dict[str, int],
        bounce_time: float = 0.08,
        settle_time: float = 0.03,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(loop)
        from gpiozero import Button

        self._directions = CallbackList("joystick")
        self._switches: dict[str, Any] = {}
        self._sampler = DirectionSampler(
            self._read_switches, self._directions.fire, settle_time=settle_time, loop=self._loop
        )
        try:
            for name, pin in pins.items():
                switch = Button(pin, pull_up=True, bounce_time=bounce_time)
                switch.when_pressed = self._threadsafe(self._sampler.edge)
                self._switches[name] = switch
                self._devices.append(switch)
        except Exception:
            self.close()
            raise
        logger.info(f"GPIO joystick initialized: {pins}")

    def _read_switches(self) -> set[str]:
        return {name for name, switch in self._switches.items() if switch.is_pressed}

    def on_direction(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self._directions.add(callback)

    def close(self) -> None:
        self._sampler.close()
        super().close()
