from __future__ import annotations

import pytest

from propctl.config.settings import MissileSettings
from propctl.core.state import InputEvent
from propctl.puzzles.missile import MissilePuzzle, MissileState, direction_matches, opposite
from propctl.testing import EventRecorder, FakeLoop


def _make(**overrides):
    loop = FakeLoop()
    puzzle = MissilePuzzle(MissileSettings(**overrides), loop=loop)
    return puzzle, loop


def _reversing(**overrides):
    puzzle, loop = _make(**overrides)
    puzzle.activate()
    loop.advance(puzzle.config.forward_anim_duration)
    assert puzzle.state is MissileState.REVERSING
    return puzzle, loop


def _steer(puzzle: MissilePuzzle, direction: str) -> None:
    puzzle.handle_input(InputEvent("direction", direction))


def _leg_time(puzzle: MissilePuzzle) -> float:
    return puzzle.config.leg_anim_duration + puzzle.config.leg_settle


@pytest.mark.parametrize(
    "direction,expected",
    [("n", "s"), ("ne", "sw"), ("e", "w"), ("se", "nw")],
)
def test_opposite(direction, expected):
    assert opposite(direction) == expected
    assert opposite(expected) == direction


def test_lenient_diagonals():
    assert direction_matches("n", "ne", lenient=True)
    assert direction_matches("e", "ne", lenient=True)
    assert not direction_matches("s", "ne", lenient=True)
    assert not direction_matches("n", "ne", lenient=False)
    assert not direction_matches("ne", "n", lenient=True)


def test_forward_flight_is_timer_driven():
    puzzle, loop = _make()
    recorder = EventRecorder(puzzle.events)
    puzzle.activate()

    forward = recorder.last("forwardAnimation").data
    assert len(forward["path"]) == 17
    assert forward["duration"] == puzzle.config.forward_anim_duration

    _steer(puzzle, "ne")
    assert recorder.of("wrongInput") == []

    loop.advance(puzzle.config.forward_anim_duration - 0.1)
    assert puzzle.state is MissileState.FORWARD_ANIMATION
    loop.advance(0.1)
    assert puzzle.state is MissileState.REVERSING
    assert recorder.last("timerUpdate").data == {"remaining": 4.0, "limit": 4.0}


def test_display_can_end_forward_flight_early():
    puzzle, loop = _make()
    puzzle.activate()
    puzzle.handle_input(InputEvent("forward_done"))
    assert puzzle.state is MissileState.REVERSING

    loop.advance(puzzle.config.forward_anim_duration)
    assert puzzle.state is MissileState.REVERSING


def test_exact_opposites_in_time_solve():
    puzzle, loop = _reversing(lenient_diagonals=False)
    recorder = EventRecorder(puzzle.events)
    legs = puzzle.total_legs

    for k in range(legs):
        expected = opposite(puzzle.config.directions[legs - 1 - k])
        assert puzzle.expected_direction == expected
        loop.advance(1.0)
        _steer(puzzle, expected)
        loop.advance(_leg_time(puzzle))

    assert puzzle.state is MissileState.SOLVED
    assert puzzle.missile_at == 0
    assert recorder.of("wrongInput") == []
    assert recorder.of("timeout") == []
    assert len(recorder.of("correctInput")) == legs
    assert len(puzzle.timers) == 0


def test_correct_input_animates_one_leg():
    puzzle, loop = _reversing()
    recorder = EventRecorder(puzzle.events)

    _steer(puzzle, puzzle.expected_direction)

    assert puzzle.state is MissileState.ANIMATE_LEG
    assert recorder.last("correctInput").data == {
        "dir": "ne",
        "fromIndex": 16,
        "toIndex": 15,
        "duration": puzzle.config.leg_anim_duration,
    }
    # Input during the leg animation is ignored
    _steer(puzzle, puzzle.expected_direction)
    assert puzzle.reverse_leg == 1

    loop.advance(_leg_time(puzzle))
    assert puzzle.state is MissileState.REVERSING
    assert puzzle.time_remaining == pytest.approx(4.0)


def test_wrong_input_keeps_countdown_running():
    puzzle, loop = _reversing()
    recorder = EventRecorder(puzzle.events)

    loop.advance(1.0)
    _steer(puzzle, "w")

    assert recorder.last("wrongInput").data == {"dir": "w", "expected": "ne"}
    assert puzzle.reverse_leg == 0
    assert puzzle.time_remaining == pytest.approx(3.0)


def test_timeout_with_progress_goes_back_to_start():
    puzzle, loop = _reversing()
    recorder = EventRecorder(puzzle.events)
    for _ in range(2):
        _steer(puzzle, puzzle.expected_direction)
        loop.advance(_leg_time(puzzle))

    loop.advance(puzzle.config.input_time_limit)

    assert recorder.last("timeout").data == {"lostLegs": 2}
    assert puzzle.reverse_leg == 0
    assert puzzle.missile_at == 16
    assert puzzle.state is MissileState.REVERSING


def test_timeout_at_start_auto_resumes_every_time():
    puzzle, loop = _reversing()
    recorder = EventRecorder(puzzle.events)

    for trial in range(1, 4):
        loop.advance(puzzle.config.input_time_limit)
        assert len(recorder.of("timeout")) == trial
        assert recorder.last("timeout").data == {"lostLegs": 0}
        assert puzzle.state is MissileState.REVERSING
        assert puzzle.time_remaining == pytest.approx(puzzle.config.input_time_limit)

    assert puzzle.timeouts == 3


def test_timeout_count_starts_over_each_game():
    puzzle, loop = _reversing()
    loop.advance(puzzle.config.input_time_limit * 2 + 0.5)
    assert puzzle.timeouts == 2

    puzzle.reset()
    assert puzzle.timeouts == 0

    puzzle.activate()
    loop.advance(puzzle.config.forward_anim_duration + puzzle.config.input_time_limit + 0.5)
    assert puzzle.timeouts == 1


def test_countdown_ticks():
    puzzle, loop = _reversing()
    recorder = EventRecorder(puzzle.events)

    loop.advance(1.0)

    remaining = [e.data["remaining"] for e in recorder.of("timerUpdate")]
    assert len(remaining) == 10
    assert remaining[-1] == pytest.approx(3.0)


def test_force_solve_and_reset():
    puzzle, loop = _reversing()
    puzzle.force_solve()
    assert puzzle.missile_at == 0
    assert puzzle.progress() == 1.0

    puzzle.reset()
    assert puzzle.state is MissileState.INACTIVE
    assert puzzle.missile_at == 16
    assert loop.pending() == 0
