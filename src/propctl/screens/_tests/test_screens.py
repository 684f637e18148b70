from __future__ import annotations

import pytest

from propctl.config.settings import ImmersionScreenSettings, RightScreenSettings, VillainScreenSettings
from propctl.screens import ImmersionScreen, RightScreen, VillainScreen
from propctl.testing import EventRecorder


def test_villain_clip_lifecycle():
    screen = VillainScreen(VillainScreenSettings())
    recorder = EventRecorder(screen.events)

    screen.play_intro()
    assert screen.get_state() == {"mode": "clip", "currentClip": "villain-intro.mp4"}
    assert recorder.last("playClip").data == {"filename": "villain-intro.mp4"}

    screen.clip_ended("villain-intro.mp4")
    assert screen.get_state() == {"mode": "idle", "currentClip": None}


def test_villain_hack_interrupts_clip_and_returns_to_idle():
    screen = VillainScreen(VillainScreenSettings())
    recorder = EventRecorder(screen.events)
    screen.play_clip("threat.mp4")

    screen.hack_mode()
    assert screen.get_state() == {"mode": "hack", "currentClip": None}
    assert "hackMode" in recorder.types()

    screen.hack_resolved()
    assert screen.mode == "idle"
    assert recorder.last("state").data == screen.get_state()


def test_right_screen_switching_and_clips():
    screen = RightScreen(RightScreenSettings())
    recorder = EventRecorder(screen.events)

    screen.switch_mode()
    assert screen.mode == "puzzle-3"
    assert recorder.last("modeChange").data == {"mode": "puzzle-3"}

    assert screen.play_clip("escape1") is True
    assert screen.mode == "tim-ferris"
    assert recorder.last("playClip").data == {"filename": "tim-ferris-escape-1.mp4", "clipId": "tf-escape1"}

    assert screen.play_clip("nope") is False


def test_right_screen_restores_mode_after_hack():
    screen = RightScreen(RightScreenSettings())
    recorder = EventRecorder(screen.events)
    screen.show("puzzle-3")

    screen.hack_mode()
    screen.switch_mode()
    assert screen.mode == "hack"

    screen.hack_resolved()
    assert screen.mode == "puzzle-3"
    assert recorder.last("modeChange").data == {"mode": "puzzle-3"}


def test_right_screen_reset_goes_back_to_tim_ferris():
    screen = RightScreen(RightScreenSettings())
    screen.show("puzzle-3")
    screen.hack_mode()

    screen.reset()
    screen.hack_resolved()

    assert screen.mode == "tim-ferris"


def test_right_screen_ignores_unknown_modes():
    screen = RightScreen(RightScreenSettings())
    screen.show("hack")
    screen.show("cinema")
    assert screen.mode == "tim-ferris"


def test_immersion_only_knows_hack():
    screen = ImmersionScreen(ImmersionScreenSettings())
    recorder = EventRecorder(screen.events)

    screen.hack_mode()
    screen.hack_mode()
    assert screen.mode == "hack"
    screen.hack_resolved()
    screen.reset()

    assert screen.mode == "idle"
    assert recorder.types().count("hackMode") == 2
    assert "reset" in recorder.types()


def test_set_mode_rejects_unknown():
    screen = ImmersionScreen(ImmersionScreenSettings())
    with pytest.raises(ValueError):
        screen._set_mode("clip")
