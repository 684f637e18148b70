"""
Abstract base classes for prop I/O.

These interfaces define the contract that both the gpiozero drivers and the
simulated devices must follow. Input devices deliver decoded events through
registered callbacks; output devices are driven by the puzzle machine only.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable
import logging

logger = logging.getLogger(__name__)


class CallbackList:
    """Registered callbacks of one input surface."""

    def __init__(self, label: str) -> None:
        self._label = label
        self._callbacks: list[Callable[..., None]] = []

    def add(self, callback: Callable[..., None]) -> Callable[[], None]:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def fire(self, *args: Any) -> None:
        for callback in list(self._callbacks):
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Error in {self._label} callback: {e}", exc_info=True)


class Device(ABC):
    """Anything holding a hardware resource."""

    simulated: bool = False

    def close(self) -> None:
        """Release pins and timers."""


class ButtonPanel(Device):
    """Momentary push buttons identified by id."""

    @abstractmethod
    def on_press(self, callback: Callable[[int], None]) -> Callable[[], None]:
        """
        Register press callback (receives the button id).

        Returns:
            Function to unregister callback
        """
        ...


class LedBank(Device):
    """On/off lamps identified by id (button id or LED index)."""

    @property
    @abstractmethod
    def ids(self) -> list[int]:
        """LED identifiers in display order."""
        ...

    @abstractmethod
    def set(self, led_id: int, on: bool) -> None:
        """Switch one LED. Unknown ids are ignored."""
        ...

    @abstractmethod
    def states(self) -> list[bool]:
        """Current on/off state in id order."""
        ...

    def all_off(self) -> None:
        for led_id in self.ids:
            self.set(led_id, False)

    def all_on(self) -> None:
        for led_id in self.ids:
            self.set(led_id, True)


class EncoderPair(Device):
    """Two rotary encoders driving the x and y axes."""

    @abstractmethod
    def on_turn(self, callback: Callable[[str, int], None]) -> Callable[[], None]:
        """Register turn callback (receives axis "x"/"y" and step +1/-1)."""
        ...


class Beeper(Device):
    """Short proximity beeps, one voice per axis."""

    @abstractmethod
    def beep(self, axis: str) -> None:
        """Play one beep for the given axis."""
        ...


class Keypad(Device):
    """Keypad delivering "0"-"9", "*" and "#"."""

    @abstractmethod
    def on_key(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Register key callback."""
        ...


class LeverBank(Device):
    """Multi-position levers; position None means unwired or between stops."""

    @abstractmethod
    def on_change(self, callback: Callable[[list[int | None]], None]) -> Callable[[], None]:
        """Register callback receiving the full position vector on any change."""
        ...

    @abstractmethod
    def positions(self) -> list[int | None]:
        """Last known position of every lever."""
        ...


class NavigationButtons(Device):
    """Left/right browse buttons plus a validate button."""

    @abstractmethod
    def on_navigate(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Register navigate callback (receives "left" or "right")."""
        ...

    @abstractmethod
    def on_validate(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register validate callback."""
        ...


class Joystick(Device):
    """8-way joystick delivering compass directions ("n", "ne", ... "nw")."""

    @abstractmethod
    def on_direction(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Register direction callback."""
        ...
