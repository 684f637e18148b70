"""
Event bus system for propctl.

Every component (puzzle machine, simulated device) owns a bus and exposes it;
the Connection Hub and Room Controller Bridge subscribe to it. Handlers run
synchronously in emission order, on the event loop thread.
"""

from dataclasses import dataclass, field
from typing import Any, Callable
from collections import defaultdict, deque
import logging
import time

logger = logging.getLogger(__name__)


# Event kinds shared across props. Puzzle-specific kinds are plain strings
# named after the wire "type" they are broadcast as.
STATE = "state"
CORRECT_PRESS = "correctPress"
WRONG_PRESS = "wrongPress"
BUTTON_BLINK = "buttonBlink"
LED_CHANGE = "ledChange"
POSITION = "position"
HOLD_PROGRESS = "holdProgress"
BEEP = "beep"
SOLVED = "solved"
RESET = "reset"
PLAY_CLIP = "playClip"
SHOW_IDLE = "showIdle"
CODE_PROGRESS = "codeProgress"
CODE_RESULT = "codeResult"
VEHICLE_CHANGED = "vehicleChanged"
LEVERS_CHANGED = "leversChanged"
VALIDATE_RESULT = "validateResult"
FORWARD_ANIMATION = "forwardAnimation"
CORRECT_INPUT = "correctInput"
WRONG_INPUT = "wrongInput"
TIMER_UPDATE = "timerUpdate"
TIMEOUT = "timeout"
HACK_MODE = "hackMode"
HACK_RESOLVED = "hackResolved"
MODE_CHANGE = "modeChange"


@dataclass
class Event:
    """
    One thing that happened in a component.

    Attributes:
        type: Event kind (also the wire "type" when broadcast)
        data: Event payload
        source: Component that emitted the event
        timestamp: Epoch seconds at creation
    """
    type: str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)

    def to_message(self) -> dict[str, Any]:
        """Flatten into a wire message: {"type": ..., **data}."""
        return {"type": self.type, **self.data}


Handler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe channel owned by one component.

    Handler exceptions are logged and never reach the emitter, so a broken
    listener cannot abort a state transition halfway.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._by_type: dict[str, list[Handler]] = defaultdict(list)
        self._catch_all: list[Handler] = []
        self._recent: deque[Event] = deque(maxlen=history_limit)

    @staticmethod
    def _remover(handlers: list[Handler], handler: Handler) -> Callable[[], None]:
        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def subscribe(self, event_type: str, handler: Handler) -> Callable[[], None]:
        """Call handler for every event of one kind. Returns an unsubscribe callable."""
        self._by_type[event_type].append(handler)
        return self._remover(self._by_type[event_type], handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Call handler for every event. Returns an unsubscribe callable."""
        self._catch_all.append(handler)
        return self._remover(self._catch_all, handler)

    def emit(self, event: Event) -> None:
        """Deliver to handlers of the event's kind first, then to catch-all handlers."""
        self._recent.append(event)
        for handler in [*self._by_type.get(event.type, ()), *self._catch_all]:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"[{event.source}] handler for {event.type!r} failed: {e}", exc_info=True)

    def get_history(self, event_type: str | None = None, limit: int = 10) -> list[Event]:
        """Most recent events, oldest first."""
        events = [e for e in self._recent if event_type is None or e.type == event_type]
        return events[-limit:]
