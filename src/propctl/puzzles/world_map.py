"""
Puzzle 2 - World Map crosshair.

Two rotary encoders move a crosshair over the map. Each axis beeps faster
the closer it gets to the target. Holding both axes inside the tolerance
box for hold_duration seconds solves the puzzle; leaving the box on either
axis resets the hold to zero.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any

from ..config.settings import WorldMapSettings
from ..core.events import HOLD_PROGRESS, POSITION, RESET, SOLVED
from ..core.state import InputEvent, PuzzleMachine
from ..core.timers import Scheduler
from ..hardware.base import Beeper

logger = logging.getLogger(__name__)

AXES = ("x", "y")

# Distance that maps to the slowest beep
MAX_DISTANCE = 0.5


def normalized_distance(position: float, target: float) -> float:
    """Axis distance to target scaled to 0-1."""
    return min(abs(position - target) / MAX_DISTANCE, 1.0)


def beep_interval(distance: float, min_interval: float, max_interval: float) -> float:
    """
    Seconds between beeps for a normalized distance.

    Square-root curve: the rate changes quickly near the target and slowly
    far away.
    """
    d = max(0.0, min(1.0, distance))
    return min_interval + math.sqrt(d) * (max_interval - min_interval)


class WorldMapState(str, Enum):
    INACTIVE = "inactive"
    TRACKING = "tracking"
    SOLVED = "solved"


class WorldMapPuzzle(PuzzleMachine):
    """Encoder crosshair with hold-to-solve."""

    name = "world-map"
    State = WorldMapState
    TRANSITIONS = [(WorldMapState.INACTIVE, WorldMapState.TRACKING)]
    ACCEPTS = {WorldMapState.TRACKING: frozenset({"turn"})}

    def __init__(self, config: WorldMapSettings, beeper: Beeper, loop: Scheduler | None = None) -> None:
        self.config = config
        self.beeper = beeper
        self.x = config.start_x
        self.y = config.start_y
        self._steps = {"x": 1 / config.steps_x, "y": 1 / config.steps_y}
        self._hold_start: float | None = None
        self._intervals: dict[str, float] = {}
        self._last_beep: dict[str, float] = {}
        super().__init__(loop)

    @property
    def hold_progress(self) -> float:
        if self._hold_start is None:
            return 0.0
        elapsed = self.timers.now() - self._hold_start
        return min(1.0, elapsed / self.config.hold_duration)

    def in_tolerance(self) -> bool:
        tol = self.config.tolerance
        return (
            abs(self.x - self.config.target_x) <= tol
            and abs(self.y - self.config.target_y) <= tol
        )

    def beep_interval(self, axis: str) -> float:
        """Current beep interval for an axis."""
        position, target = (
            (self.x, self.config.target_x) if axis == "x" else (self.y, self.config.target_y)
        )
        return beep_interval(
            normalized_distance(position, target),
            self.config.min_beep_interval,
            self.config.max_beep_interval,
        )

    # -- audio ----------------------------------------------------------

    def _update_audio(self) -> None:
        now = self.timers.now()
        for axis in AXES:
            interval = self.beep_interval(axis)
            if self._intervals.get(axis) == interval and self.timers.is_active(f"beep:{axis}"):
                continue
            self._intervals[axis] = interval
            last = self._last_beep.setdefault(axis, now)
            # Keep the beep phase so steady turning does not starve the beeper
            self.timers.schedule(f"beep:{axis}", max(0.0, last + interval - now), lambda a=axis: self._beep(a))

    def _beep(self, axis: str) -> None:
        self._last_beep[axis] = self.timers.now()
        self.beeper.beep(axis)
        self.timers.schedule(f"beep:{axis}", self._intervals[axis], lambda: self._beep(axis))

    def _stop_audio(self) -> None:
        self.timers.cancel_prefix("beep:")
        self._intervals.clear()
        self._last_beep.clear()

    # -- hold -----------------------------------------------------------

    def _check_hold(self) -> None:
        if self.in_tolerance():
            if self._hold_start is None:
                logger.debug(f"[{self.name}] Inside tolerance, holding")
                self._hold_start = self.timers.now()
                self.timers.schedule_repeating("hold-tick", self.config.hold_tick, self._hold_tick)
                self.timers.schedule("hold-complete", self.config.hold_duration, self._hold_complete)
        else:
            self._cancel_hold()

    def _cancel_hold(self) -> None:
        self.timers.cancel("hold-tick")
        self.timers.cancel("hold-complete")
        if self._hold_start is not None:
            self._hold_start = None
            self.emit_event(HOLD_PROGRESS, progress=0.0)

    def _hold_tick(self) -> None:
        self.emit_event(HOLD_PROGRESS, progress=self.hold_progress)

    def _hold_complete(self) -> None:
        self.emit_event(HOLD_PROGRESS, progress=1.0)
        logger.info(f"[{self.name}] SOLVED!")
        self._hold_start = None
        self._stop_audio()
        self._solve()
        self.emit_event(SOLVED)

    # -- hooks ----------------------------------------------------------

    def _on_activate(self) -> None:
        self.x = self.config.start_x
        self.y = self.config.start_y
        self._hold_start = None
        self.transition(WorldMapState.TRACKING)
        self.emit_event(POSITION, x=self.x, y=self.y)
        self._update_audio()
        self._check_hold()

    def _on_input(self, event: InputEvent) -> None:
        try:
            axis, step = event.value
        except (TypeError, ValueError):
            return
        if axis not in AXES or step not in (1, -1):
            return

        if axis == "x":
            self.x = max(0.0, min(1.0, self.x + step * self._steps["x"]))
        else:
            self.y = max(0.0, min(1.0, self.y + step * self._steps["y"]))

        self.emit_event(POSITION, x=self.x, y=self.y)
        self.emit_state()
        self._update_audio()
        self._check_hold()

    def _on_force_solve(self) -> None:
        self._hold_start = None
        self._stop_audio()
        self.x = self.config.target_x
        self.y = self.config.target_y
        self.emit_event(POSITION, x=self.x, y=self.y)
        self.emit_event(SOLVED)

    def _on_reset(self) -> None:
        self._hold_start = None
        self._stop_audio()
        self.x = self.config.start_x
        self.y = self.config.start_y
        self.emit_event(POSITION, x=self.x, y=self.y)

    def reset(self) -> None:
        super().reset()
        self.emit_event(RESET, **self.get_state())
        logger.info(f"[{self.name}] Reset to start position")

    def _snapshot(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "solved": self.is_solved,
            "active": self.state is WorldMapState.TRACKING,
        }

    def progress(self) -> float:
        return 1.0 if self.is_solved else self.hold_progress
