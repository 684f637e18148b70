"""Puzzle 2 binding: encoders + beeper around the world map machine."""

from __future__ import annotations

import logging
from typing import Any

from ..core.state import InputEvent
from ..puzzles.world_map import WorldMapPuzzle
from .base import Message, PuzzleBinding

logger = logging.getLogger(__name__)


class WorldMapBinding(PuzzleBinding):
    name = "world-map"

    @property
    def section(self):
        return self.settings.world_map

    def build(self) -> WorldMapPuzzle:
        config = self.settings.world_map
        self.encoders = self.own(self.devices.encoders(self.hardware.encoders))
        self.beeper = self.own(self.devices.beeper(config.beep_frequency_hz, config.beep_duration_ms))

        machine = WorldMapPuzzle(config, self.beeper, loop=self.loop)
        self.encoders.on_turn(lambda axis, step: machine.handle_input(InputEvent("turn", (axis, step))))
        self.client("key", self._on_key, mock_only=True)
        return machine

    def _on_key(self, message: Message) -> None:
        self.encoders.simulate_turn(message.get("axis"), message.get("direction"))

    def manifest(self) -> dict[str, Any]:
        config = self.settings.world_map
        return {
            "target": {"x": config.target_x, "y": config.target_y},
            "tolerance": config.tolerance,
            "holdDuration": config.hold_duration,
            "beepFrequency": config.beep_frequency_hz,
            "beepDuration": config.beep_duration_ms,
        }

    def start(self) -> None:
        if self.settings.world_map.auto_activate:
            logger.info(f"[{self.name}] Auto-activating")
            self.activate()

    def reset(self) -> None:
        super().reset()
        if self.settings.world_map.auto_activate:
            self.activate()
