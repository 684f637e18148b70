"""
Puzzle state machine base for propctl.

Every puzzle follows the same shape:

    inactive -> running(sub-states...) -> solved

with reset() returning to inactive from anywhere and force_solve() jumping to
solved from anywhere but solved. Subclasses declare their State enum, the
sub-state transitions, and which input kinds each sub-state accepts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar
import logging
import time

from .events import Event, EventBus, Handler, STATE
from .timers import Scheduler, TimerSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputEvent:
    """
    A decoded hardware (or simulated) input occurrence.

    Attributes:
        kind: Input kind, e.g. "press", "turn", "digit", "direction"
        value: Kind-specific payload (button id, (axis, step), digit, ...)
        timestamp: When the input was decoded
    """
    kind: str
    value: Any = None
    timestamp: float = field(default_factory=time.time)


class PuzzleMachine(ABC):
    """
    Owns all puzzle state, its timers and its event bus.

    Wrong player input is an event (wrongPress, wrongInput), never an
    exception. Input outside an accepting sub-state is ignored.
    """

    name: ClassVar[str] = "puzzle"

    # Subclasses provide a str Enum with at least INACTIVE and SOLVED
    State: ClassVar[type[Enum]]

    # Sub-state transitions; reset/force_solve edges are added automatically
    TRANSITIONS: ClassVar[list[tuple[Enum, Enum]]] = []

    # Input kinds accepted per state
    ACCEPTS: ClassVar[dict[Enum, frozenset[str]]] = {}

    def __init__(self, loop: Scheduler | None = None) -> None:
        self.events = EventBus()
        self.timers = TimerSet(loop, owner=self.name)
        self._state = self.State.INACTIVE
        self._valid_transitions = self._build_transitions()
        logger.info(f"[{self.name}] initialized in state: {self._state.value}")

    def _build_transitions(self) -> set[tuple[Enum, Enum]]:
        valid = set(self.TRANSITIONS)
        for state in self.State:
            valid.add((state, self.State.INACTIVE))
            if state is not self.State.SOLVED:
                valid.add((state, self.State.SOLVED))
        return valid

    # -- state ----------------------------------------------------------

    @property
    def state(self) -> Enum:
        """Get current state."""
        return self._state

    @property
    def is_solved(self) -> bool:
        return self._state is self.State.SOLVED

    def can_transition(self, to_state: Enum) -> bool:
        """Check if transition to given state is valid."""
        return (self._state, to_state) in self._valid_transitions

    def transition(self, to_state: Enum, announce: bool = True) -> bool:
        """
        Move to a new state.

        Args:
            to_state: Target state
            announce: Broadcast the resulting snapshot as a "state" event

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_state):
            logger.warning(f"[{self.name}] Invalid transition: {self._state.value} -> {to_state.value}")
            return False

        old_state = self._state
        self._state = to_state
        logger.info(f"[{self.name}] {old_state.value} -> {to_state.value}")

        if announce:
            self.emit_state()
        return True

    # -- events ---------------------------------------------------------

    def on(self, event_type: str, handler: Handler) -> Callable[[], None]:
        """Subscribe to one event kind of this machine."""
        return self.events.subscribe(event_type, handler)

    def on_any(self, handler: Handler) -> Callable[[], None]:
        """Subscribe to every event of this machine."""
        return self.events.subscribe_all(handler)

    def emit_event(self, kind: str, **data: Any) -> None:
        self.events.emit(Event(kind, data=data, source=self.name))

    def emit_state(self) -> None:
        """Broadcast the current snapshot."""
        self.emit_event(STATE, **self.get_state())

    # -- operations -----------------------------------------------------

    def activate(self) -> None:
        """Start the puzzle. Only valid from inactive; otherwise ignored."""
        if self._state is not self.State.INACTIVE:
            logger.debug(f"[{self.name}] activate ignored in {self._state.value}")
            return
        logger.info(f"[{self.name}] Activating")
        self.timers.cancel_all()
        self._on_activate()

    def accepts(self, kind: str) -> bool:
        """Whether the current sub-state takes input of this kind."""
        return kind in self.ACCEPTS.get(self._state, frozenset())

    def handle_input(self, event: InputEvent) -> None:
        """Feed one input event. Ignored outside an accepting sub-state."""
        if not self.accepts(event.kind):
            logger.debug(f"[{self.name}] {event.kind} ignored in {self._state.value}")
            return
        self._on_input(event)

    def force_solve(self) -> None:
        """Jump to solved (GM override). No-op when already solved."""
        if self._state is self.State.SOLVED:
            return
        logger.info(f"[{self.name}] Force-solved by GM")
        self.timers.cancel_all()
        self._on_force_solve()
        self._state = self.State.SOLVED
        self.emit_state()

    def reset(self) -> None:
        """Cancel every timer, restore initial values, go back to inactive."""
        logger.info(f"[{self.name}] Resetting")
        self.timers.cancel_all()
        self._on_reset()
        self._state = self.State.INACTIVE
        self.emit_state()

    def get_state(self) -> dict[str, Any]:
        """ProgressSnapshot: a pure projection of the current state."""
        return {"state": self._state.value, **self._snapshot()}

    def close(self) -> None:
        """Release timers on shutdown."""
        self.timers.cancel_all()

    def _solve(self) -> None:
        """Natural solve from a running sub-state."""
        self.timers.cancel_all()
        self.transition(self.State.SOLVED)

    # -- subclass hooks -------------------------------------------------

    @abstractmethod
    def _on_activate(self) -> None:
        """Set up the running state. Must transition out of inactive."""

    @abstractmethod
    def _on_input(self, event: InputEvent) -> None:
        """Handle an accepted input event."""

    @abstractmethod
    def _on_force_solve(self) -> None:
        """Drive fields and outputs to their complete configuration."""

    @abstractmethod
    def _on_reset(self) -> None:
        """Restore fields and outputs to their initial configuration."""

    @abstractmethod
    def _snapshot(self) -> dict[str, Any]:
        """Puzzle-specific snapshot fields."""

    @abstractmethod
    def progress(self) -> float:
        """Completion fraction 0-1 reported to the Room Controller."""
