"""
Named, cancelable timers for puzzle machines.

A TimerSet wraps loop.call_later(). Each timer has a name (one per button,
axis or leg); scheduling a name that is already live replaces it. On top of
handle cancellation, every callback checks that it is still the registered
timer and that no cancel_all() happened since it was scheduled, so a stale
firing can never mutate a superseded state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """The slice of asyncio.AbstractEventLoop the timers need."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...

    def time(self) -> float: ...


@dataclass(eq=False)
class _Timer:
    name: str
    generation: int
    handle: TimerHandle | None = None


class TimerSet:
    """Timers owned by one component."""

    def __init__(self, loop: Scheduler | None = None, owner: str = "timers") -> None:
        self._loop = loop
        self._owner = owner
        self._timers: dict[str, _Timer] = {}
        self._generation = 0

    @property
    def loop(self) -> Scheduler:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        """Current loop time in seconds."""
        return self.loop.time()

    def schedule(self, name: str, delay: float, callback: Callable[[], None]) -> None:
        """Run callback once after delay seconds, replacing any timer of that name."""
        self.cancel(name)
        timer = _Timer(name=name, generation=self._generation)

        def fire() -> None:
            if not self._is_live(timer):
                return
            del self._timers[name]
            callback()

        timer.handle = self.loop.call_later(max(0.0, delay), fire)
        self._timers[name] = timer

    def schedule_repeating(self, name: str, interval: float, callback: Callable[[], None]) -> None:
        """Run callback every interval seconds until cancelled."""
        self.cancel(name)
        timer = _Timer(name=name, generation=self._generation)

        def fire() -> None:
            if not self._is_live(timer):
                return
            # Re-arm first so the callback may cancel its own timer
            timer.handle = self.loop.call_later(interval, fire)
            callback()

        timer.handle = self.loop.call_later(interval, fire)
        self._timers[name] = timer

    def cancel(self, name: str) -> bool:
        """Cancel a timer by name. Returns True if one was live."""
        timer = self._timers.pop(name, None)
        if timer is None:
            return False
        if timer.handle is not None:
            timer.handle.cancel()
        return True

    def cancel_prefix(self, prefix: str) -> int:
        """Cancel every timer whose name starts with prefix."""
        names = [n for n in self._timers if n.startswith(prefix)]
        for name in names:
            self.cancel(name)
        return len(names)

    def cancel_all(self) -> None:
        """Cancel every live timer and invalidate anything already dispatched."""
        self._generation += 1
        count = len(self._timers)
        for timer in list(self._timers.values()):
            if timer.handle is not None:
                timer.handle.cancel()
        self._timers.clear()
        if count:
            logger.debug(f"[{self._owner}] cancelled {count} timers")

    def is_active(self, name: str) -> bool:
        return name in self._timers

    def active(self) -> list[str]:
        """Names of live timers."""
        return sorted(self._timers)

    def __len__(self) -> int:
        return len(self._timers)

    def _is_live(self, timer: _Timer) -> bool:
        return timer.generation == self._generation and self._timers.get(timer.name) is timer
