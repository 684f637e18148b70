"""
Puzzle 1 - Simon button grid.

Every unlocked button blinks on its own random schedule. Pressing a button
while it is lit locks it (LED stays on); pressing an unlit or already locked
button flashes the whole panel. The puzzle is solved once every button is
locked.
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Any

from ..config.settings import SimonSettings
from ..core.events import BUTTON_BLINK, CORRECT_PRESS, WRONG_PRESS
from ..core.state import InputEvent, PuzzleMachine
from ..core.timers import Scheduler
from ..hardware.base import LedBank

logger = logging.getLogger(__name__)


class SimonState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    SOLVED = "solved"


class SimonPuzzle(PuzzleMachine):
    """Random-blink button grid."""

    name = "simon"
    State = SimonState
    TRANSITIONS = [(SimonState.INACTIVE, SimonState.ACTIVE)]
    ACCEPTS = {SimonState.ACTIVE: frozenset({"press"})}

    def __init__(
        self,
        config: SimonSettings,
        leds: LedBank,
        loop: Scheduler | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.leds = leds
        self._rng = rng or random.Random()
        self._buttons = list(config.button_ids)
        self._lit: set[int] = set()
        self._locked: set[int] = set()
        self._flashing = False
        super().__init__(loop)

    @property
    def lit_buttons(self) -> list[int]:
        return sorted(self._lit)

    @property
    def pressed_count(self) -> int:
        return len(self._locked)

    # -- blink schedule -------------------------------------------------

    def _next_interval(self) -> float:
        low, high = self.config.blink_interval_min, self.config.blink_interval_max
        return low + self._rng.random() * (high - low)

    def _schedule_blink(self, button_id: int) -> None:
        if button_id in self._locked:
            return
        self.timers.schedule(f"blink:{button_id}", self._next_interval(), lambda: self._blink_on(button_id))

    def _blink_on(self, button_id: int) -> None:
        self._lit.add(button_id)
        self._show(button_id)
        self.emit_event(BUTTON_BLINK, buttonId=button_id, isLit=True)
        self.timers.schedule(
            f"blink:{button_id}", self.config.blink_duration, lambda: self._blink_off(button_id)
        )

    def _blink_off(self, button_id: int) -> None:
        self._lit.discard(button_id)
        self._show(button_id)
        self.emit_event(BUTTON_BLINK, buttonId=button_id, isLit=False)
        self._schedule_blink(button_id)

    # -- LEDs -----------------------------------------------------------

    def _show(self, button_id: int) -> None:
        """Drive one LED from the lit/locked sets (the flash owns the panel while it runs)."""
        if self._flashing:
            return
        self.leds.set(button_id, button_id in self._lit or button_id in self._locked)

    def _flash(self) -> None:
        self._flashing = True
        self.leds.all_on()
        self.timers.schedule("flash", self.config.wrong_flash_duration, self._end_flash)

    def _end_flash(self) -> None:
        self._flashing = False
        for button_id in self._buttons:
            self._show(button_id)

    # -- hooks ----------------------------------------------------------

    def _on_activate(self) -> None:
        self._lit.clear()
        self._locked.clear()
        self._flashing = False
        self.leds.all_off()
        self.transition(SimonState.ACTIVE)
        logger.info(f"[{self.name}] Starting random blink patterns")
        for button_id in self._buttons:
            self._schedule_blink(button_id)

    def _on_input(self, event: InputEvent) -> None:
        button_id = event.value
        if button_id not in self._buttons:
            logger.debug(f"[{self.name}] Unknown button {button_id!r}")
            return

        if button_id in self._lit and button_id not in self._locked:
            logger.info(f"[{self.name}] Correct press: button {button_id}")
            self.timers.cancel(f"blink:{button_id}")
            self._lit.discard(button_id)
            self._locked.add(button_id)
            self._show(button_id)
            self.emit_event(CORRECT_PRESS, buttonId=button_id, pressedCount=len(self._locked))
            if len(self._locked) == len(self._buttons):
                logger.info(f"[{self.name}] SOLVED! All buttons pressed")
                self._flashing = False
                self.leds.all_on()
                self._solve()
            else:
                self.emit_state()
        else:
            logger.info(f"[{self.name}] Wrong press: button {button_id}")
            self.emit_event(WRONG_PRESS, buttonId=button_id)
            self._flash()

    def _on_force_solve(self) -> None:
        self._lit.clear()
        self._locked = set(self._buttons)
        self._flashing = False
        self.leds.all_on()

    def _on_reset(self) -> None:
        self._lit.clear()
        self._locked.clear()
        self._flashing = False
        self.leds.all_off()

    def _snapshot(self) -> dict[str, Any]:
        return {
            "totalButtons": len(self._buttons),
            "pressedCount": len(self._locked),
            "pressedButtons": sorted(self._locked),
        }

    def progress(self) -> float:
        return len(self._locked) / len(self._buttons) if self._buttons else 0.0
