"""
Puzzle 4 - Vehicle selector.

Players browse a fixed list of vehicles and set four levers. Validating
succeeds only on the correct vehicle with that vehicle's lever code. A
failed attempt shows feedback for a moment and returns to browsing with
everything left where it was.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Sequence

from ..config.settings import VehicleSettings
from ..core.events import LEVERS_CHANGED, VALIDATE_RESULT, VEHICLE_CHANGED
from ..core.state import InputEvent, PuzzleMachine
from ..core.timers import Scheduler

logger = logging.getLogger(__name__)


class VehicleState(str, Enum):
    INACTIVE = "inactive"
    BROWSING = "browsing"
    FEEDBACK = "feedback"
    SOLVED = "solved"


class VehiclePuzzle(PuzzleMachine):
    """Vehicle browser with a lever code."""

    name = "vehicle"
    State = VehicleState
    TRANSITIONS = [
        (VehicleState.INACTIVE, VehicleState.BROWSING),
        (VehicleState.BROWSING, VehicleState.FEEDBACK),
        (VehicleState.FEEDBACK, VehicleState.BROWSING),
    ]
    ACCEPTS = {
        VehicleState.BROWSING: frozenset({"navigate", "validate", "levers", "lever_set", "lever_adjust"}),
        # Levers keep tracking the hardware while feedback shows
        VehicleState.FEEDBACK: frozenset({"levers"}),
    }

    def __init__(self, config: VehicleSettings, loop: Scheduler | None = None) -> None:
        self.config = config
        self.current_vehicle = 0
        self.levers = self._initial_levers()
        super().__init__(loop)

    def _initial_levers(self) -> list[int]:
        return [1] * self.config.lever_count

    @property
    def vehicle(self):
        return self.config.vehicles[self.current_vehicle]

    def is_correct(self) -> bool:
        correct = self.config.correct_vehicle_index
        return (
            self.current_vehicle == correct
            and self.levers == list(self.config.vehicles[correct].code)
        )

    # -- convenience entry points -------------------------------------

    def navigate(self, direction: str) -> None:
        self.handle_input(InputEvent("navigate", direction))

    def validate(self) -> None:
        self.handle_input(InputEvent("validate"))

    def set_lever(self, index: int, position: int) -> None:
        self.handle_input(InputEvent("lever_set", (index, position)))

    def set_levers(self, positions: Sequence[int | None]) -> None:
        self.handle_input(InputEvent("levers", list(positions)))

    def adjust_lever(self, index: int, delta: int) -> None:
        self.handle_input(InputEvent("lever_adjust", (index, delta)))

    # -- handlers -------------------------------------------------------

    def _emit_vehicle(self) -> None:
        vehicle = self.vehicle
        self.emit_event(VEHICLE_CHANGED, index=self.current_vehicle, name=vehicle.name, video=vehicle.video)

    def _emit_levers(self) -> None:
        self.emit_event(LEVERS_CHANGED, levers=list(self.levers))

    def _navigate(self, direction: object) -> None:
        total = len(self.config.vehicles)
        if direction == "left":
            self.current_vehicle = (self.current_vehicle - 1) % total
        elif direction == "right":
            self.current_vehicle = (self.current_vehicle + 1) % total
        else:
            return
        logger.info(f"[{self.name}] Vehicle: {self.vehicle.name} ({self.current_vehicle + 1}/{total})")
        self._emit_vehicle()
        self.emit_state()

    def _valid_position(self, position: object) -> bool:
        return (
            isinstance(position, int)
            and not isinstance(position, bool)
            and 1 <= position <= self.config.lever_positions
        )

    def _set_lever(self, index: object, position: object) -> None:
        if not isinstance(index, int) or not 0 <= index < self.config.lever_count:
            return
        if not self._valid_position(position) or self.levers[index] == position:
            return
        self.levers[index] = position
        logger.info(f"[{self.name}] Lever {index + 1} -> {position}  {self.levers}")
        self._emit_levers()
        self.emit_state()

    def _set_levers(self, positions: object) -> None:
        if not isinstance(positions, (list, tuple)):
            return
        changed = False
        for index, position in enumerate(positions[: self.config.lever_count]):
            # None means the lever sits on an unwired position
            if position is None or not self._valid_position(position):
                continue
            if self.levers[index] != position:
                self.levers[index] = position
                changed = True
        if changed:
            logger.info(f"[{self.name}] Levers updated: {self.levers}")
            self._emit_levers()
            self.emit_state()

    def _adjust_lever(self, index: object, delta: object) -> None:
        if not isinstance(index, int) or not 0 <= index < self.config.lever_count:
            return
        if not isinstance(delta, int) or isinstance(delta, bool):
            return
        position = max(1, min(self.config.lever_positions, self.levers[index] + delta))
        self._set_lever(index, position)

    def _validate(self) -> None:
        vehicle = self.vehicle
        logger.info(f"[{self.name}] Validate: levers={self.levers}, vehicle={vehicle.name!r}")
        if self.is_correct():
            self.emit_event(VALIDATE_RESULT, correct=True, vehicleName=vehicle.name)
            logger.info(f"[{self.name}] SOLVED!")
            self._solve()
            return

        self.transition(VehicleState.FEEDBACK, announce=False)
        self.emit_event(VALIDATE_RESULT, correct=False, vehicleName=vehicle.name)
        self.emit_state()
        self.timers.schedule("feedback", self.config.feedback_delay, self._end_feedback)

    def _end_feedback(self) -> None:
        self.transition(VehicleState.BROWSING)

    # -- hooks ----------------------------------------------------------

    def _on_activate(self) -> None:
        self.current_vehicle = 0
        self.levers = self._initial_levers()
        self.transition(VehicleState.BROWSING, announce=False)
        self._emit_vehicle()
        self.emit_state()

    def _on_input(self, event: InputEvent) -> None:
        kind, value = event.kind, event.value
        if kind == "navigate":
            self._navigate(value)
        elif kind == "validate":
            self._validate()
        elif kind == "levers":
            self._set_levers(value)
        elif kind in ("lever_set", "lever_adjust"):
            try:
                index, amount = value
            except (TypeError, ValueError):
                return
            if kind == "lever_set":
                self._set_lever(index, amount)
            else:
                self._adjust_lever(index, amount)

    def _on_force_solve(self) -> None:
        self.current_vehicle = self.config.correct_vehicle_index
        self.levers = list(self.vehicle.code)
        self._emit_vehicle()
        self._emit_levers()
        self.emit_event(VALIDATE_RESULT, correct=True, vehicleName=self.vehicle.name)

    def _on_reset(self) -> None:
        self.current_vehicle = 0
        self.levers = self._initial_levers()

    def _snapshot(self) -> dict[str, Any]:
        vehicle = self.vehicle
        return {
            "currentVehicle": self.current_vehicle,
            "totalVehicles": len(self.config.vehicles),
            "vehicleName": vehicle.name,
            "vehicleVideo": vehicle.video,
            "levers": list(self.levers),
            "leverCount": self.config.lever_count,
            "leverPositions": self.config.lever_positions,
        }

    def progress(self) -> float:
        return 1.0 if self.is_solved else 0.0
