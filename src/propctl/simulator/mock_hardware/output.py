"""
Simulated output devices.

Instead of driving pins these forward their state as events so the browser
can render LEDs and play beeps with Web Audio.
"""

import logging

from ...core.events import BEEP, LED_CHANGE, Event, EventBus
from ...hardware.base import Beeper, LedBank

logger = logging.getLogger(__name__)


class SimulatedLedBank(LedBank):
    """LEDs rendered by the browser."""

    simulated = True

    def __init__(self, led_ids: list[int], id_field: str = "buttonId") -> None:
        self._ids = list(led_ids)
        self._state = {led_id: False for led_id in self._ids}
        self._id_field = id_field
        self.events = EventBus()

    @property
    def ids(self) -> list[int]:
        return list(self._ids)

    def set(self, led_id: int, on: bool) -> None:
        if led_id not in self._state:
            return
        self._state[led_id] = on
        self.events.emit(Event(LED_CHANGE, data={self._id_field: led_id, "state": on}, source="leds"))

    def states(self) -> list[bool]:
        return [self._state[led_id] for led_id in self._ids]


class SimulatedBeeper(Beeper):
    """Beeps played by the browser."""

    simulated = True

    def __init__(self) -> None:
        self.events = EventBus()

    def beep(self, axis: str) -> None:
        self.events.emit(Event(BEEP, data={"axis": axis}, source="beeper"))
