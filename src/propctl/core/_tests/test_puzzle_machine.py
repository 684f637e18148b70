from __future__ import annotations

from enum import Enum
from typing import Any

from propctl.core.state import InputEvent, PuzzleMachine
from propctl.testing import EventRecorder, FakeLoop


class ToyState(str, Enum):
    INACTIVE = "inactive"
    RUNNING = "running"
    SOLVED = "solved"


class CounterPuzzle(PuzzleMachine):
    """Solved after three "tick" inputs."""

    name = "counter"
    State = ToyState
    TRANSITIONS = [(ToyState.INACTIVE, ToyState.RUNNING)]
    ACCEPTS = {ToyState.RUNNING: frozenset({"tick"})}

    def __init__(self, loop: FakeLoop) -> None:
        self.count = 0
        super().__init__(loop)

    def _on_activate(self) -> None:
        self.count = 0
        self.transition(ToyState.RUNNING)
        self.timers.schedule("idle", 5.0, lambda: None)

    def _on_input(self, event: InputEvent) -> None:
        self.count += 1
        if self.count == 3:
            self._solve()
        else:
            self.emit_state()

    def _on_force_solve(self) -> None:
        self.count = 3

    def _on_reset(self) -> None:
        self.count = 0

    def _snapshot(self) -> dict[str, Any]:
        return {"count": self.count}

    def progress(self) -> float:
        return self.count / 3


def test_activate_only_from_inactive():
    loop = FakeLoop()
    machine = CounterPuzzle(loop)
    machine.activate()
    machine.handle_input(InputEvent("tick"))
    machine.activate()

    assert machine.state is ToyState.RUNNING
    assert machine.count == 1


def test_input_ignored_outside_accepting_state():
    machine = CounterPuzzle(FakeLoop())
    machine.handle_input(InputEvent("tick"))
    assert machine.count == 0

    machine.activate()
    machine.handle_input(InputEvent("unknown"))
    assert machine.count == 0


def test_invalid_transition_is_refused():
    machine = CounterPuzzle(FakeLoop())
    machine.force_solve()
    assert machine.transition(ToyState.RUNNING) is False
    assert machine.state is ToyState.SOLVED


def test_force_solve_is_idempotent_and_cancels_timers():
    loop = FakeLoop()
    machine = CounterPuzzle(loop)
    recorder = EventRecorder(machine.events)
    machine.activate()

    machine.force_solve()
    machine.force_solve()

    assert machine.is_solved
    assert len(machine.timers) == 0
    assert loop.pending() == 0
    solved_states = [e for e in recorder.of("state") if e.data["state"] == "solved"]
    assert len(solved_states) == 1


def test_reset_from_any_state_cancels_every_timer():
    loop = FakeLoop()
    machine = CounterPuzzle(loop)
    machine.activate()
    machine.handle_input(InputEvent("tick"))

    machine.reset()

    assert machine.state is ToyState.INACTIVE
    assert machine.count == 0
    assert len(machine.timers) == 0
    assert loop.pending() == 0


def test_get_state_matches_last_broadcast_snapshot():
    machine = CounterPuzzle(FakeLoop())
    recorder = EventRecorder(machine.events)
    machine.activate()
    machine.handle_input(InputEvent("tick"))
    machine.handle_input(InputEvent("tick"))

    assert recorder.last("state").data == machine.get_state()
    assert machine.get_state() == {"state": "running", "count": 2}
