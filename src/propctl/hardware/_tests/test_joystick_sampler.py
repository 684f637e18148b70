from __future__ import annotations

import pytest

from propctl.hardware.joystick import DirectionSampler, SamplerState, combine_switches, normalize_direction
from propctl.testing import FakeLoop


@pytest.mark.parametrize(
    "pressed,direction",
    [
        ({"up"}, "n"),
        ({"down"}, "s"),
        ({"left"}, "w"),
        ({"right"}, "e"),
        ({"up", "right"}, "ne"),
        ({"down", "left"}, "sw"),
        ({"up", "down"}, None),
        (set(), None),
    ],
)
def test_combine_switches(pressed, direction):
    assert combine_switches(pressed) == direction


def test_normalize_direction_accepts_aliases_and_case():
    assert normalize_direction("UP") == "n"
    assert normalize_direction("Se") == "se"
    assert normalize_direction("north") is None
    assert normalize_direction(3) is None


def test_diagonal_sampled_once_after_settle_window():
    loop = FakeLoop()
    closed: set[str] = set()
    directions: list[str] = []
    sampler = DirectionSampler(lambda: set(closed), directions.append, settle_time=0.03, loop=loop)

    closed.add("up")
    sampler.edge()
    loop.advance(0.01)
    closed.add("left")
    sampler.edge()
    assert sampler.state is SamplerState.SETTLING

    loop.advance(0.03)
    assert directions == ["nw"]
    assert sampler.state is SamplerState.IDLE


def test_release_before_sampling_emits_nothing():
    loop = FakeLoop()
    closed = {"down"}
    directions: list[str] = []
    sampler = DirectionSampler(lambda: set(closed), directions.append, loop=loop)

    sampler.edge()
    closed.clear()
    loop.advance(0.1)

    assert directions == []
