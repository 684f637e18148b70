"""
8-way joystick decoding.

The joystick closes one microswitch per cardinal; a diagonal closes two. The
two switches of a diagonal never close at exactly the same instant, so the
first edge opens a short settle window and the switch combination is sampled
once when it ends:

    IDLE --edge--> SETTLING --window elapsed / sample--> IDLE
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable
import logging

from ..core.timers import Scheduler, TimerSet

logger = logging.getLogger(__name__)


# Clockwise from north
COMPASS = ("n", "ne", "e", "se", "s", "sw", "w", "nw")

# Switch / keyboard names accepted for cardinals
ALIASES = {"up": "n", "down": "s", "left": "w", "right": "e"}


def normalize_direction(value: object) -> str | None:
    """Map "up"/"ne"/"N" style input onto a compass point, or None."""
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    value = ALIASES.get(value, value)
    return value if value in COMPASS else None


def combine_switches(pressed: Iterable[str]) -> str | None:
    """Decode a set of closed switches ("up", "left", ...) into a direction."""
    closed = set(pressed)
    vertical = ""
    if "up" in closed and "down" not in closed:
        vertical = "n"
    elif "down" in closed and "up" not in closed:
        vertical = "s"

    horizontal = ""
    if "right" in closed and "left" not in closed:
        horizontal = "e"
    elif "left" in closed and "right" not in closed:
        horizontal = "w"

    return (vertical + horizontal) or None


class SamplerState(Enum):
    IDLE = "idle"
    SETTLING = "settling"


class DirectionSampler:
    """Turns raw switch edges into one direction per joystick movement."""

    def __init__(
        self,
        read_switches: Callable[[], set[str]],
        on_direction: Callable[[str], None],
        settle_time: float = 0.03,
        loop: Scheduler | None = None,
    ) -> None:
        self._read_switches = read_switches
        self._on_direction = on_direction
        self._settle_time = settle_time
        self._timers = TimerSet(loop, owner="joystick")
        self.state = SamplerState.IDLE

    def edge(self) -> None:
        """A switch closed."""
        if self.state is SamplerState.SETTLING:
            return
        self.state = SamplerState.SETTLING
        self._timers.schedule("settle", self._settle_time, self._sample)

    def _sample(self) -> None:
        self.state = SamplerState.IDLE
        pressed = self._read_switches()
        direction = combine_switches(pressed)
        if direction is None:
            logger.debug(f"Joystick released before sampling ({sorted(pressed)})")
            return
        self._on_direction(direction)

    def close(self) -> None:
        self._timers.cancel_all()
        self.state = SamplerState.IDLE
