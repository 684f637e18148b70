"""Puzzle 4 binding: navigation buttons + lever bank around the vehicle machine."""

from __future__ import annotations

from typing import Any

from ..puzzles.vehicle import VehiclePuzzle
from .base import Message, PuzzleBinding


class VehicleBinding(PuzzleBinding):
    name = "vehicle"

    @property
    def section(self):
        return self.settings.vehicle

    def build(self) -> VehiclePuzzle:
        config = self.settings.vehicle
        self.navigation = self.own(self.devices.navigation(self.hardware.vehicle))
        self.levers = self.own(
            self.devices.levers(
                self.hardware.vehicle,
                count=config.lever_count,
                positions=config.lever_positions,
                poll_interval=config.lever_poll_interval,
            )
        )

        machine = VehiclePuzzle(config, loop=self.loop)
        self.navigation.on_navigate(machine.navigate)
        self.navigation.on_validate(machine.validate)
        self.levers.on_change(machine.set_levers)

        self.client("navigate", lambda m: self.navigation.simulate_navigate(m.get("direction")), mock_only=True)
        self.client("validate", lambda m: self.navigation.simulate_validate(), mock_only=True)
        self.client("leverAdjust", self._on_lever_adjust, mock_only=True)
        return machine

    def _on_lever_adjust(self, message: Message) -> None:
        self.levers.simulate_adjust(message.get("lever"), message.get("delta"))

    def activate(self) -> None:
        super().activate()
        # Physical levers do not move on reset; pick up where they sit
        self.machine.set_levers(self.levers.positions())

    def manifest(self) -> dict[str, Any]:
        return {"videos": [v.video for v in self.settings.vehicle.vehicles]}
