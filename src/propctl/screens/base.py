"""
Display screen controllers.

Screens have no puzzle to solve: they only track which mode the display is
in and relay clips and hack effects. Like puzzle machines they own an event
bus, and every mode change is announced as a "state" event.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, ClassVar

from ..core.events import HACK_MODE, HACK_RESOLVED, RESET, STATE, Event, EventBus, Handler

logger = logging.getLogger(__name__)


class ScreenController:
    """Mode holder for a passive display."""

    name: ClassVar[str] = "screen"
    MODES: ClassVar[tuple[str, ...]] = ("idle", "hack")
    DEFAULT_MODE: ClassVar[str] = "idle"

    def __init__(self) -> None:
        self.events = EventBus()
        self.mode = self.DEFAULT_MODE
        self._mode_before_hack = self.DEFAULT_MODE

    @property
    def in_hack(self) -> bool:
        return self.mode == "hack"

    def on(self, event_type: str, handler: Handler) -> Callable[[], None]:
        return self.events.subscribe(event_type, handler)

    def on_any(self, handler: Handler) -> Callable[[], None]:
        return self.events.subscribe_all(handler)

    def emit_event(self, kind: str, **data: Any) -> None:
        self.events.emit(Event(kind, data=data, source=self.name))

    def emit_state(self) -> None:
        self.emit_event(STATE, **self.get_state())

    def _set_mode(self, mode: str) -> None:
        if mode not in self.MODES:
            raise ValueError(f"unknown mode {mode!r}")
        if mode != self.mode:
            logger.info(f"[{self.name}] Mode: {self.mode} -> {mode}")
        self.mode = mode

    def hack_mode(self) -> None:
        if not self.in_hack:
            self._mode_before_hack = self.mode
        self._set_mode("hack")
        logger.info(f"[{self.name}] Hack mode activated")
        self.emit_event(HACK_MODE)
        self.emit_state()

    def hack_resolved(self) -> None:
        self._set_mode(self._restore_mode())
        logger.info(f"[{self.name}] Hack resolved")
        self.emit_event(HACK_RESOLVED)
        self.emit_state()

    def _restore_mode(self) -> str:
        return self.DEFAULT_MODE

    def reset(self) -> None:
        logger.info(f"[{self.name}] Reset")
        self._set_mode(self.DEFAULT_MODE)
        self._mode_before_hack = self.DEFAULT_MODE
        self._on_reset()
        self.emit_event(RESET)
        self.emit_state()

    def _on_reset(self) -> None:
        pass

    def get_state(self) -> dict[str, Any]:
        return {"mode": self.mode, **self._snapshot()}

    def _snapshot(self) -> dict[str, Any]:
        return {}

    def close(self) -> None:
        pass
