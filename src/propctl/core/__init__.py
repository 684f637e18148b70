"""Core framework components for propctl."""

from .state import InputEvent, PuzzleMachine
from .events import EventBus, Event
from .timers import TimerSet

__all__ = ["InputEvent", "PuzzleMachine", "EventBus", "Event", "TimerSet"]
