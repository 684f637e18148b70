from __future__ import annotations

from propctl.core.timers import TimerSet
from propctl.testing import FakeLoop


def test_one_shot_fires_once_after_delay():
    loop = FakeLoop()
    timers = TimerSet(loop)
    fired: list[float] = []

    timers.schedule("blink", 1.0, lambda: fired.append(loop.time()))
    loop.advance(0.99)
    assert fired == []
    loop.advance(0.01)
    assert fired == [1.0]
    assert not timers.is_active("blink")

    loop.advance(5.0)
    assert fired == [1.0]


def test_same_name_replaces_live_timer():
    loop = FakeLoop()
    timers = TimerSet(loop)
    fired: list[str] = []

    timers.schedule("beep:x", 1.0, lambda: fired.append("old"))
    timers.schedule("beep:x", 2.0, lambda: fired.append("new"))
    loop.advance(3.0)

    assert fired == ["new"]


def test_repeating_runs_until_cancelled():
    loop = FakeLoop()
    timers = TimerSet(loop)
    ticks: list[float] = []

    timers.schedule_repeating("tick", 0.1, lambda: ticks.append(round(loop.time(), 3)))
    loop.advance(0.35)
    timers.cancel("tick")
    loop.advance(1.0)

    assert ticks == [0.1, 0.2, 0.3]
    assert loop.pending() == 0


def test_repeating_callback_may_cancel_itself():
    loop = FakeLoop()
    timers = TimerSet(loop)
    ticks: list[int] = []

    def tick() -> None:
        ticks.append(1)
        if len(ticks) == 2:
            timers.cancel("tick")

    timers.schedule_repeating("tick", 1.0, tick)
    loop.advance(10.0)

    assert len(ticks) == 2


def test_cancel_all_leaves_nothing_pending():
    loop = FakeLoop()
    timers = TimerSet(loop)
    fired: list[str] = []
    for i in range(5):
        timers.schedule(f"blink:{i}", 1.0 + i, lambda i=i: fired.append(str(i)))
    timers.schedule_repeating("hold-tick", 0.1, lambda: fired.append("tick"))

    timers.cancel_all()
    loop.advance(10.0)

    assert fired == []
    assert len(timers) == 0
    assert loop.pending() == 0


def test_cancel_prefix_only_hits_matching_names():
    loop = FakeLoop()
    timers = TimerSet(loop)
    timers.schedule("beep:x", 1.0, lambda: None)
    timers.schedule("beep:y", 1.0, lambda: None)
    timers.schedule("hold-complete", 1.0, lambda: None)

    assert timers.cancel_prefix("beep:") == 2
    assert timers.active() == ["hold-complete"]


def test_stale_callback_after_cancel_all_is_a_no_op():
    """A handle dispatched before cancel_all() must not run its callback."""
    loop = FakeLoop()
    timers = TimerSet(loop)
    fired: list[str] = []

    timers.schedule("leg", 1.0, lambda: fired.append("leg"))
    # Grab the underlying callback as if the loop had already dequeued it
    _, _, handle = loop._queue[0]
    timers.cancel_all()
    handle._run()

    assert fired == []
