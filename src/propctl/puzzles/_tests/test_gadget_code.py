from __future__ import annotations

from propctl.config.settings import GadgetCodeSettings
from propctl.core.state import InputEvent
from propctl.puzzles.gadget_code import GadgetCodePuzzle, GadgetState
from propctl.simulator.mock_hardware import SimulatedLedBank
from propctl.testing import EventRecorder, FakeLoop


def _make():
    loop = FakeLoop()
    config = GadgetCodeSettings()
    leds = SimulatedLedBank(list(range(len(config.situations))), id_field="index")
    return GadgetCodePuzzle(config, leds, loop=loop), leds, loop


def _feed(puzzle: GadgetCodePuzzle, kind: str, value=None) -> None:
    puzzle.handle_input(InputEvent(kind, value))


def _enter(puzzle: GadgetCodePuzzle, code: str) -> None:
    for digit in code:
        _feed(puzzle, "digit", digit)
    _feed(puzzle, "submit")


def _to_situation(puzzle: GadgetCodePuzzle) -> None:
    puzzle.activate()
    _feed(puzzle, "clip_ended", "intro")
    _feed(puzzle, "clip_ended", "situation-1")


def test_intro_then_first_situation():
    puzzle, leds, loop = _make()
    recorder = EventRecorder(puzzle.events)

    puzzle.activate()
    assert puzzle.state is GadgetState.INTRO
    assert recorder.last("playClip").data == {"filename": "intro.mp4", "clipId": "intro"}

    _feed(puzzle, "clip_ended", "intro")
    assert puzzle.state is GadgetState.PLAYING_CLIP
    assert recorder.last("playClip").data["clipId"] == "situation-1"

    _feed(puzzle, "situation_clip_ended")
    assert puzzle.state is GadgetState.SITUATION
    assert recorder.last("showIdle").data == {"situationIndex": 0}


def test_correct_code_advances_and_lights_led():
    puzzle, leds, loop = _make()
    recorder = EventRecorder(puzzle.events)
    _to_situation(puzzle)

    _enter(puzzle, "4729")

    assert puzzle.current_situation == 1
    assert leds.states() == [True, False, False]
    assert recorder.last("codeResult").data == {"correct": True, "code": "4729"}
    assert puzzle.current_clip == "correct"

    _feed(puzzle, "clip_ended", "correct")
    assert recorder.last("playClip").data["clipId"] == "situation-2"


def test_wrong_code_changes_nothing():
    puzzle, leds, loop = _make()
    recorder = EventRecorder(puzzle.events)
    _to_situation(puzzle)

    _enter(puzzle, "1234")

    assert puzzle.current_situation == 0
    assert leds.states() == [False, False, False]
    assert recorder.last("codeResult").data == {"correct": False, "code": "1234"}

    _feed(puzzle, "clip_ended", "wrong")
    assert puzzle.state is GadgetState.SITUATION
    assert puzzle.code_buffer == ""


def test_input_ignored_while_clip_plays():
    puzzle, leds, loop = _make()
    _to_situation(puzzle)
    _enter(puzzle, "1234")
    assert puzzle.state is GadgetState.PLAYING_CLIP

    _enter(puzzle, "4729")

    assert puzzle.current_situation == 0
    assert puzzle.code_buffer == ""


def test_buffer_blocks_at_code_length():
    puzzle, leds, loop = _make()
    recorder = EventRecorder(puzzle.events)
    _to_situation(puzzle)

    for digit in "47291":
        _feed(puzzle, "digit", digit)

    assert puzzle.code_buffer == "4729"
    assert recorder.last("codeProgress").data == {"entered": 4, "total": 4}


def test_delete_clear_and_empty_submit():
    puzzle, leds, loop = _make()
    _to_situation(puzzle)

    _feed(puzzle, "digit", "4")
    _feed(puzzle, "digit", 7)
    _feed(puzzle, "delete")
    assert puzzle.code_buffer == "4"

    _feed(puzzle, "clear")
    _feed(puzzle, "submit")
    assert puzzle.state is GadgetState.SITUATION
    assert puzzle.code_buffer == ""

    _feed(puzzle, "digit", "x")
    assert puzzle.code_buffer == ""


def test_buffer_edits_push_state():
    puzzle, leds, loop = _make()
    recorder = EventRecorder(puzzle.events)
    _to_situation(puzzle)

    _feed(puzzle, "digit", "4")
    assert recorder.last("state").data == puzzle.get_state()
    assert puzzle.get_state()["codeProgress"] == 1

    _feed(puzzle, "digit", "2")
    _feed(puzzle, "delete")
    assert recorder.last("state").data["codeProgress"] == 1

    _feed(puzzle, "clear")
    assert recorder.last("state").data == puzzle.get_state()
    assert puzzle.get_state()["codeProgress"] == 0


def test_stale_clip_end_is_ignored():
    puzzle, leds, loop = _make()
    _to_situation(puzzle)
    _enter(puzzle, "4729")

    _feed(puzzle, "clip_ended", "wrong")
    assert puzzle.state is GadgetState.PLAYING_CLIP
    assert puzzle.current_clip == "correct"


def test_all_situations_then_solved_clip():
    puzzle, leds, loop = _make()
    recorder = EventRecorder(puzzle.events)
    _to_situation(puzzle)

    for index, situation in enumerate(puzzle.config.situations):
        _enter(puzzle, situation.correct_code)
        _feed(puzzle, "clip_ended", "correct")
        if index < puzzle.total_situations - 1:
            _feed(puzzle, "clip_ended", f"situation-{index + 2}")

    assert recorder.last("playClip").data == {"filename": "solved.mp4", "clipId": "solved"}
    assert puzzle.state is GadgetState.PLAYING_CLIP

    _feed(puzzle, "clip_ended", "solved")
    assert puzzle.state is GadgetState.SOLVED
    assert puzzle.progress() == 1.0
    assert leds.states() == [True, True, True]


def test_force_solve_plays_solved_clip():
    puzzle, leds, loop = _make()
    recorder = EventRecorder(puzzle.events)
    puzzle.activate()

    puzzle.force_solve()

    assert puzzle.is_solved
    assert recorder.last("playClip").data["clipId"] == "solved"
    assert all(leds.states())


def test_video_manifest_lists_every_clip():
    puzzle, leds, loop = _make()
    manifest = puzzle.video_manifest()
    assert manifest[:3] == ["situation-1.mp4", "situation-2.mp4", "situation-3.mp4"]
    assert "intro.mp4" in manifest and "idle.mp4" in manifest
