"""Puzzle 5 binding: 8-way joystick around the missile machine."""

from __future__ import annotations

from typing import Any

from ..core.state import InputEvent
from ..puzzles.missile import MissilePuzzle
from .base import PuzzleBinding


class MissileBinding(PuzzleBinding):
    name = "missile"

    @property
    def section(self):
        return self.settings.missile

    def build(self) -> MissilePuzzle:
        self.joystick = self.own(self.devices.joystick(self.hardware.joystick))

        machine = MissilePuzzle(self.settings.missile, loop=self.loop)
        self.joystick.on_direction(lambda d: machine.handle_input(InputEvent("direction", d)))

        self.client("forwardAnimDone", lambda m: machine.handle_input(InputEvent("forward_done")))
        self.client("direction", lambda m: self.joystick.simulate_direction(m.get("direction")), mock_only=True)
        return machine

    def manifest(self) -> dict[str, Any]:
        return {
            "path": self.machine.path_payload(),
            "directions": list(self.settings.missile.directions),
            "timeLimit": self.settings.missile.input_time_limit,
        }
