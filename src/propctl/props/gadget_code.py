"""Puzzle 3 binding: Wiegand keypad + situation LEDs around the gadget code machine."""

from __future__ import annotations

import logging
from typing import Any

from ..core.state import InputEvent
from ..puzzles.gadget_code import GadgetCodePuzzle
from .base import Message, PuzzleBinding

logger = logging.getLogger(__name__)

# Keypad keys that are commands rather than digits
KEY_COMMANDS = {"*": "clear", "#": "submit"}


class GadgetCodeBinding(PuzzleBinding):
    name = "gadget-code"

    @property
    def section(self):
        return self.settings.gadget_code

    def build(self) -> GadgetCodePuzzle:
        config = self.settings.gadget_code
        led_pins = self.hardware.gadget_leds.leds
        # One LED per situation, indexed from 0
        pins = {i: led_pins[i] if i < len(led_pins) else None for i in range(len(config.situations))}

        self.keypad = self.own(self.devices.keypad(self.hardware.keypad))
        self.leds = self.own(self.devices.leds(pins, id_field="index"))

        machine = GadgetCodePuzzle(config, self.leds, loop=self.loop)
        self.keypad.on_key(self.on_key)

        self.client("clipEnded", lambda m: self._feed("clip_ended", m.get("clipId")))
        self.client("situationClipEnded", lambda m: self._feed("situation_clip_ended"))
        self.client("digit", lambda m: self._feed("digit", m.get("digit")), mock_only=True)
        self.client("submit", lambda m: self._feed("submit"), mock_only=True)
        self.client("delete", lambda m: self._feed("delete"), mock_only=True)
        self.client("clear", lambda m: self._feed("clear"), mock_only=True)
        self.client("key", self._on_key_message, mock_only=True)
        return machine

    def _feed(self, kind: str, value: Any = None) -> None:
        self.machine.handle_input(InputEvent(kind, value))

    def on_key(self, key: str) -> None:
        """Translate one keypad key into puzzle input."""
        logger.debug(f"[{self.name}] Key: {key}")
        command = KEY_COMMANDS.get(key)
        if command is not None:
            self._feed(command)
        elif key.isdigit():
            self._feed("digit", key)

    def _on_key_message(self, message: Message) -> None:
        self.keypad.simulate_key(message.get("key"))

    def manifest(self) -> dict[str, Any]:
        return {"videos": self.machine.video_manifest()}
