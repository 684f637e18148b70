"""
Puzzle 5 - Missile reversal.

The villain's missile flies a fixed path of cities. Once the forward
flight has played, the players steer it back one leg at a time with the
joystick, giving the opposite of each leg's direction from the last leg to
the first. Every input window has a countdown.

Policy:
    * A wrong direction is reported (wrongInput) and ignored; the
      countdown keeps running.
    * When the countdown runs out, progress goes back to the start and a
      fresh countdown starts at once (timeout), also when no leg has been
      reversed yet.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..config.settings import MissileSettings
from ..core.events import (
    CORRECT_INPUT,
    FORWARD_ANIMATION,
    TIMEOUT,
    TIMER_UPDATE,
    WRONG_INPUT,
)
from ..core.state import InputEvent, PuzzleMachine
from ..core.timers import Scheduler
from ..hardware.joystick import COMPASS, normalize_direction

logger = logging.getLogger(__name__)


def opposite(direction: str) -> str:
    """Compass opposite, e.g. "ne" -> "sw"."""
    return COMPASS[(COMPASS.index(direction) + 4) % len(COMPASS)]


def direction_matches(given: str, expected: str, lenient: bool = False) -> bool:
    """
    Whether a joystick direction answers an expected one.

    With lenient set, a cardinal matching either half of an expected diagonal
    also counts ("s" or "w" for "sw").
    """
    if given == expected:
        return True
    return lenient and len(expected) == 2 and len(given) == 1 and given in expected


class MissileState(str, Enum):
    INACTIVE = "inactive"
    FORWARD_ANIMATION = "forward_animation"
    REVERSING = "reversing"
    ANIMATE_LEG = "animate_leg"
    SOLVED = "solved"


class MissilePuzzle(PuzzleMachine):
    """Joystick direction reversal against a countdown."""

    name = "missile"
    State = MissileState
    TRANSITIONS = [
        (MissileState.INACTIVE, MissileState.FORWARD_ANIMATION),
        (MissileState.FORWARD_ANIMATION, MissileState.REVERSING),
        (MissileState.REVERSING, MissileState.ANIMATE_LEG),
        (MissileState.ANIMATE_LEG, MissileState.REVERSING),
    ]
    ACCEPTS = {
        MissileState.FORWARD_ANIMATION: frozenset({"forward_done"}),
        MissileState.REVERSING: frozenset({"direction"}),
    }

    def __init__(self, config: MissileSettings, loop: Scheduler | None = None) -> None:
        self.config = config
        self.total_legs = len(config.directions)
        self.reverse_leg = 0
        self.missile_at = len(config.path) - 1
        self._deadline: float | None = None
        self.timeouts = 0
        super().__init__(loop)

    @property
    def expected_direction(self) -> str | None:
        """Direction that reverses the current leg, None outside the game."""
        if self.reverse_leg >= self.total_legs:
            return None
        return opposite(self.config.directions[self.total_legs - 1 - self.reverse_leg])

    @property
    def time_remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self.timers.now())

    def path_payload(self) -> list[dict[str, Any]]:
        return [city.model_dump() for city in self.config.path]

    # -- countdown ------------------------------------------------------

    def _arm_countdown(self) -> None:
        limit = self.config.input_time_limit
        self._deadline = self.timers.now() + limit
        self.timers.schedule("timeout", limit, self._timeout)
        self.timers.schedule_repeating("countdown", self.config.timer_tick, self._tick)
        self.emit_event(TIMER_UPDATE, remaining=limit, limit=limit)

    def _stop_countdown(self) -> None:
        self.timers.cancel("timeout")
        self.timers.cancel("countdown")
        self._deadline = None

    def _tick(self) -> None:
        self.emit_event(TIMER_UPDATE, remaining=self.time_remaining, limit=self.config.input_time_limit)

    def _timeout(self) -> None:
        self.timeouts += 1
        lost = self.reverse_leg
        logger.info(f"[{self.name}] Timeout after {lost} legs - back to the start")
        self._stop_countdown()
        self.reverse_leg = 0
        self.missile_at = len(self.config.path) - 1
        self.emit_event(TIMEOUT, lostLegs=lost)
        self.emit_state()
        self._arm_countdown()

    # -- flow -----------------------------------------------------------

    def _start_reversing(self) -> None:
        logger.info(f"[{self.name}] Forward animation complete - ready for reverse input")
        self.timers.cancel("forward")
        self.transition(MissileState.REVERSING)
        self._arm_countdown()

    def _direction(self, value: object) -> None:
        direction = normalize_direction(value)
        if direction is None:
            return
        expected = self.expected_direction
        logger.debug(f"[{self.name}] Input: {direction} | Expected: {expected}")

        if expected is None or not direction_matches(direction, expected, self.config.lenient_diagonals):
            self.emit_event(WRONG_INPUT, dir=direction, expected=expected)
            return

        self._stop_countdown()
        from_index = self.missile_at
        self.missile_at -= 1
        self.reverse_leg += 1
        self.transition(MissileState.ANIMATE_LEG, announce=False)
        self.emit_event(
            CORRECT_INPUT,
            dir=direction,
            fromIndex=from_index,
            toIndex=self.missile_at,
            duration=self.config.leg_anim_duration,
        )
        self.emit_state()
        self.timers.schedule(
            "leg", self.config.leg_anim_duration + self.config.leg_settle, self._leg_done
        )

    def _leg_done(self) -> None:
        if self.reverse_leg >= self.total_legs:
            logger.info(f"[{self.name}] SOLVED! Missile returned to origin")
            self._solve()
            return
        self.transition(MissileState.REVERSING)
        self._arm_countdown()

    # -- hooks ----------------------------------------------------------

    def _on_activate(self) -> None:
        logger.info(f"[{self.name}] Playing forward animation")
        self.timeouts = 0
        self.reverse_leg = 0
        self.missile_at = len(self.config.path) - 1
        self._deadline = None
        self.transition(MissileState.FORWARD_ANIMATION, announce=False)
        self.emit_event(
            FORWARD_ANIMATION,
            path=self.path_payload(),
            directions=list(self.config.directions),
            duration=self.config.forward_anim_duration,
        )
        self.emit_state()
        self.timers.schedule("forward", self.config.forward_anim_duration, self._start_reversing)

    def _on_input(self, event: InputEvent) -> None:
        if event.kind == "forward_done":
            self._start_reversing()
        elif event.kind == "direction":
            self._direction(event.value)

    def _on_force_solve(self) -> None:
        self._deadline = None
        self.missile_at = 0
        self.reverse_leg = self.total_legs

    def _on_reset(self) -> None:
        self._deadline = None
        self.timeouts = 0
        self.reverse_leg = 0
        self.missile_at = len(self.config.path) - 1

    def _snapshot(self) -> dict[str, Any]:
        return {
            "missileAt": self.missile_at,
            "reverseLeg": self.reverse_leg,
            "totalLegs": self.total_legs,
            "totalCities": len(self.config.path),
            "path": self.path_payload(),
            "directions": list(self.config.directions),
            "timeLimit": self.config.input_time_limit,
        }

    def progress(self) -> float:
        return self.reverse_leg / self.total_legs if self.total_legs else 0.0
