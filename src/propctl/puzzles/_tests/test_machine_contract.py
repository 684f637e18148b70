"""Behaviour every puzzle machine shares: reset, force solve and snapshots."""

from __future__ import annotations

import random
from typing import Callable

import pytest

from propctl.config.settings import (
    GadgetCodeSettings,
    MissileSettings,
    SimonSettings,
    VehicleSettings,
    WorldMapSettings,
)
from propctl.core.state import InputEvent, PuzzleMachine
from propctl.puzzles import GadgetCodePuzzle, MissilePuzzle, SimonPuzzle, VehiclePuzzle, WorldMapPuzzle
from propctl.simulator.mock_hardware import SimulatedBeeper, SimulatedLedBank
from propctl.testing import EventRecorder, FakeLoop


def _simon(loop: FakeLoop) -> PuzzleMachine:
    config = SimonSettings()
    return SimonPuzzle(config, SimulatedLedBank(config.button_ids), loop=loop, rng=random.Random(1))


def _world_map(loop: FakeLoop) -> PuzzleMachine:
    return WorldMapPuzzle(WorldMapSettings(), SimulatedBeeper(), loop=loop)


def _gadget(loop: FakeLoop) -> PuzzleMachine:
    return GadgetCodePuzzle(GadgetCodeSettings(), SimulatedLedBank([0, 1, 2], id_field="index"), loop=loop)


def _vehicle(loop: FakeLoop) -> PuzzleMachine:
    return VehiclePuzzle(VehicleSettings(), loop=loop)


def _missile(loop: FakeLoop) -> PuzzleMachine:
    return MissilePuzzle(MissileSettings(), loop=loop)


def _noop() -> None:
    pass


def _drive_simon(puzzle, loop, check=_noop):
    for _ in range(30):
        loop.advance(0.1)
        check()
        if puzzle.lit_buttons:
            break
    if puzzle.lit_buttons:
        puzzle.handle_input(InputEvent("press", puzzle.lit_buttons[0]))
        check()
    puzzle.handle_input(InputEvent("press", 99))
    check()


def _drive_world_map(puzzle, loop, check=_noop):
    for _ in range(40):
        puzzle.handle_input(InputEvent("turn", ("x", 1)))
        check()
    for _ in range(5):
        loop.advance(0.1)
        check()


def _drive_gadget(puzzle, loop, check=_noop):
    for kind, value in [
        ("clip_ended", "intro"),
        ("clip_ended", "situation-1"),
        ("digit", "4"),
        ("digit", "2"),
        ("delete", None),
        ("clear", None),
        ("digit", "1"),
    ]:
        puzzle.handle_input(InputEvent(kind, value))
        check()


def _drive_vehicle(puzzle, loop, check=_noop):
    puzzle.navigate("right")
    check()
    puzzle.validate()
    check()


def _drive_missile(puzzle, loop, check=_noop):
    loop.advance(puzzle.config.forward_anim_duration)
    check()
    puzzle.handle_input(InputEvent("direction", puzzle.expected_direction))
    check()
    for _ in range(5):
        loop.advance(0.5)
        check()


MACHINES: list[tuple[str, Callable, Callable]] = [
    ("simon", _simon, _drive_simon),
    ("world-map", _world_map, _drive_world_map),
    ("gadget-code", _gadget, _drive_gadget),
    ("vehicle", _vehicle, _drive_vehicle),
    ("missile", _missile, _drive_missile),
]
IDS = [m[0] for m in MACHINES]


def _quiet_after_reset(puzzle: PuzzleMachine, loop: FakeLoop) -> None:
    recorder = EventRecorder(puzzle.events)
    puzzle.reset()
    assert puzzle.get_state()["state"] == "inactive"
    assert len(puzzle.timers) == 0

    recorder.clear()
    loop.advance(60.0)
    assert recorder.events == []
    assert loop.pending() == 0


@pytest.mark.parametrize("name,build,drive", MACHINES, ids=IDS)
def test_reset_from_inactive(name, build, drive):
    loop = FakeLoop()
    _quiet_after_reset(build(loop), loop)


@pytest.mark.parametrize("name,build,drive", MACHINES, ids=IDS)
def test_reset_from_running(name, build, drive):
    loop = FakeLoop()
    puzzle = build(loop)
    puzzle.activate()
    drive(puzzle, loop)
    _quiet_after_reset(puzzle, loop)


@pytest.mark.parametrize("name,build,drive", MACHINES, ids=IDS)
def test_reset_from_solved(name, build, drive):
    loop = FakeLoop()
    puzzle = build(loop)
    puzzle.activate()
    puzzle.force_solve()
    _quiet_after_reset(puzzle, loop)


@pytest.mark.parametrize("name,build,drive", MACHINES, ids=IDS)
def test_force_solve_leaves_no_timers(name, build, drive):
    loop = FakeLoop()
    puzzle = build(loop)
    puzzle.activate()
    drive(puzzle, loop)

    puzzle.force_solve()
    puzzle.force_solve()

    assert puzzle.is_solved
    assert len(puzzle.timers) == 0
    assert loop.pending() == 0


@pytest.mark.parametrize("name,build,drive", MACHINES, ids=IDS)
def test_activate_after_reset_starts_fresh(name, build, drive):
    loop = FakeLoop()
    puzzle = build(loop)
    puzzle.activate()
    initial = puzzle.get_state()
    drive(puzzle, loop)
    puzzle.reset()

    puzzle.activate()

    assert puzzle.get_state() == initial


@pytest.mark.parametrize("name,build,drive", MACHINES, ids=IDS)
def test_snapshot_matches_last_state_event(name, build, drive):
    loop = FakeLoop()
    puzzle = build(loop)
    recorder = EventRecorder(puzzle.events)

    def check() -> None:
        assert recorder.last("state").data == puzzle.get_state()

    puzzle.activate()
    check()
    drive(puzzle, loop, check)
    puzzle.force_solve()
    check()
    puzzle.reset()
    check()
