"""Helpers for driving machines on simulated time."""

from __future__ import annotations

import heapq
import itertools
from typing import Any, Callable


class FakeHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self._callback = callback
        self._args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def _run(self) -> None:
        self._callback(*self._args)


class FakeLoop:
    """Virtual clock with the call_later()/time() surface of an asyncio loop."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: list[tuple[float, int, FakeHandle]] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self._now + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        return self.call_later(0.0, callback, *args)

    def advance(self, delta: float) -> None:
        """Move time forward, running every callback that comes due in order."""
        target = self._now + delta
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            self._now = max(self._now, when)
            if not handle.cancelled:
                handle._run()
        self._now = target

    def pending(self) -> int:
        """Number of scheduled, non-cancelled callbacks."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)


class EventRecorder:
    """Collects events from a bus for assertions."""

    def __init__(self, bus: Any) -> None:
        self.events: list[Any] = []
        self._unsubscribe = bus.subscribe_all(self.events.append)

    def types(self) -> list[str]:
        return [e.type for e in self.events]

    def of(self, kind: str) -> list[Any]:
        return [e for e in self.events if e.type == kind]

    def last(self, kind: str) -> Any:
        matching = self.of(kind)
        return matching[-1] if matching else None

    def clear(self) -> None:
        self.events.clear()

    def close(self) -> None:
        self._unsubscribe()
