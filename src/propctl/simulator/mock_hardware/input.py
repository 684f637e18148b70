"""
Simulated input devices.

In mock mode the browser's keyboard handlers send simulated-input messages
over the display WebSocket; the Connection Hub routes them to the
simulate_* entry points here. Invalid ids and values are dropped.
"""

from typing import Callable
import logging

from ...hardware.base import (
    ButtonPanel,
    CallbackList,
    EncoderPair,
    Joystick,
    Keypad,
    LeverBank,
    NavigationButtons,
)
from ...hardware.joystick import normalize_direction

logger = logging.getLogger(__name__)


class SimulatedButtonPanel(ButtonPanel):
    """Button grid pressed from the browser."""

    simulated = True

    def __init__(self, button_ids: list[int]) -> None:
        self._ids = set(button_ids)
        self._presses = CallbackList("button")

    def on_press(self, callback: Callable[[int], None]) -> Callable[[], None]:
        return self._presses.add(callback)

    def simulate_press(self, button_id: object) -> None:
        if isinstance(button_id, bool) or not isinstance(button_id, int) or button_id not in self._ids:
            logger.debug(f"Ignoring press of unknown button {button_id!r}")
            return
        self._presses.fire(button_id)


class SimulatedEncoders(EncoderPair):
    """Crosshair encoders driven by arrow keys / WASD."""

    simulated = True

    def __init__(self) -> None:
        self._turns = CallbackList("encoder")

    def on_turn(self, callback: Callable[[str, int], None]) -> Callable[[], None]:
        return self._turns.add(callback)

    def simulate_turn(self, axis: object, direction: object) -> None:
        if axis not in ("x", "y") or direction not in (1, -1) or isinstance(direction, bool):
            logger.debug(f"Ignoring turn {axis!r}/{direction!r}")
            return
        self._turns.fire(axis, direction)


class SimulatedKeypad(Keypad):
    """
    Simulates the keypad.

    Keys are mapped from number keys 0-9 and * #.
    """

    simulated = True

    VALID_KEYS = set("0123456789*#")

    def __init__(self) -> None:
        self._keys = CallbackList("keypad")

    def on_key(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self._keys.add(callback)

    def simulate_key(self, key: object) -> None:
        if not isinstance(key, str) or key not in self.VALID_KEYS:
            return
        self._keys.fire(key)


class SimulatedLevers(LeverBank):
    """Levers nudged up and down from the keyboard."""

    simulated = True

    def __init__(self, count: int, positions: int) -> None:
        self._count = count
        self._max = positions
        self._positions: list[int | None] = [None] * count
        self._changes = CallbackList("lever")

    def on_change(self, callback: Callable[[list[int | None]], None]) -> Callable[[], None]:
        return self._changes.add(callback)

    def positions(self) -> list[int | None]:
        return list(self._positions)

    def simulate_set(self, lever: object, position: object) -> None:
        if not isinstance(lever, int) or not 0 <= lever < self._count:
            return
        if isinstance(position, bool) or not isinstance(position, int) or not 1 <= position <= self._max:
            return
        if self._positions[lever] == position:
            return
        self._positions[lever] = position
        logger.debug(f"Lever {lever + 1} set to position {position}")
        self._changes.fire(self.positions())

    def simulate_adjust(self, lever: object, delta: object) -> None:
        if not isinstance(lever, int) or not 0 <= lever < self._count:
            return
        if not isinstance(delta, int) or isinstance(delta, bool):
            return
        current = self._positions[lever] or 1
        self.simulate_set(lever, max(1, min(self._max, current + delta)))


class SimulatedNavigation(NavigationButtons):
    """Arrow keys + Enter."""

    simulated = True

    def __init__(self) -> None:
        self._navigate = CallbackList("navigate")
        self._validate = CallbackList("validate")

    def on_navigate(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self._navigate.add(callback)

    def on_validate(self, callback: Callable[[], None]) -> Callable[[], None]:
        return self._validate.add(callback)

    def simulate_navigate(self, direction: object) -> None:
        if direction in ("left", "right"):
            self._navigate.fire(direction)

    def simulate_validate(self) -> None:
        self._validate.fire()


class SimulatedJoystick(Joystick):
    """Arrow keys (and diagonals from the numpad)."""

    simulated = True

    def __init__(self) -> None:
        self._directions = CallbackList("joystick")

    def on_direction(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self._directions.add(callback)

    def simulate_direction(self, value: object) -> None:
        direction = normalize_direction(value)
        if direction is None:
            return
        self._directions.fire(direction)
