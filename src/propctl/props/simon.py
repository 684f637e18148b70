"""Puzzle 1 binding: button panel + LEDs around the Simon machine."""

from __future__ import annotations

from typing import Any

from ..core.state import InputEvent
from ..puzzles.simon import SimonPuzzle
from .base import Message, PuzzleBinding


class SimonBinding(PuzzleBinding):
    name = "simon"
    ACTIVATE_ON_HACK = True

    @property
    def section(self):
        return self.settings.simon

    def build(self) -> SimonPuzzle:
        config = self.settings.simon
        pins = self.hardware.simon
        # Ids without a pin pair make the GPIO driver fail and fall back to simulation
        wired = {i: pins.buttons.get(i, (None, None)) for i in config.button_ids}

        self.panel = self.own(
            self.devices.buttons({i: p[0] for i, p in wired.items()}, bounce_time=pins.bounce_time)
        )
        self.leds = self.own(self.devices.leds({i: p[1] for i, p in wired.items()}))

        machine = SimonPuzzle(config, self.leds, loop=self.loop)
        self.panel.on_press(lambda button_id: machine.handle_input(InputEvent("press", button_id)))
        self.client("buttonPress", self._on_button_press, mock_only=True)
        return machine

    def _on_button_press(self, message: Message) -> None:
        self.panel.simulate_press(message.get("buttonId"))

    def manifest(self) -> dict[str, Any]:
        color = self.settings.simon.color
        return {"buttons": [{"id": i, "color": color} for i in self.settings.simon.button_ids]}
