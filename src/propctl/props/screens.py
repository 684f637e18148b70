"""Bindings for the passive display screens."""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any

from ..core.events import STATE
from ..errors import CommandError
from ..screens import ImmersionScreen, RightScreen, ScreenController, VillainScreen
from ..screens.right import PUZZLE_3, TIM_FERRIS
from .base import Message, PropBinding, require

logger = logging.getLogger(__name__)


class ScreenBinding(PropBinding):
    """Shared hack/reset handling for screens."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.screen = self.build()
        self.client("ready", self._on_ready)
        self.command("hack_mode", lambda p: self.screen.hack_mode())
        self.command("hack_resolved", lambda p: self.screen.hack_resolved())
        self.command("reset", lambda p: self.screen.reset())

    @abstractmethod
    def build(self) -> ScreenController:
        ...

    @property
    def component(self) -> ScreenController:
        return self.screen

    def _on_ready(self, message: Message) -> None:
        logger.info(f"[{self.name}] Client ready")

    def rc_state(self) -> dict[str, Any]:
        return {"mode": self.screen.mode}


class VillainScreenBinding(ScreenBinding):
    name = "screen-villain"

    @property
    def section(self):
        return self.settings.screen_villain

    def build(self) -> VillainScreen:
        screen = VillainScreen(self.settings.screen_villain)
        self.client("clipEnded", lambda m: screen.clip_ended(m.get("filename")))
        self.client("reset", lambda m: screen.reset())
        self.client("activate", lambda m: screen.play_intro(), mock_only=True)
        self.client("hackMode", lambda m: screen.hack_mode(), mock_only=True)
        self.client("hackResolved", lambda m: screen.hack_resolved(), mock_only=True)
        self.command("play_clip", lambda p: screen.play_clip(require(p, "filename")))
        return screen

    def _on_ready(self, message: Message) -> list[Message]:
        super()._on_ready(message)
        return [{"type": STATE, **self.get_state()}]

    def manifest(self) -> dict[str, Any]:
        return {"videos": self.screen.video_manifest()}

    def rc_state(self) -> dict[str, Any]:
        return {"mode": self.screen.mode, "currentClip": self.screen.current_clip}


class RightScreenBinding(ScreenBinding):
    name = "screen-right"

    @property
    def section(self):
        return self.settings.screen_right

    def build(self) -> RightScreen:
        screen = RightScreen(self.settings.screen_right)
        self.client("switchMode", lambda m: screen.switch_mode())
        self.client("setMode", lambda m: screen.show(m.get("mode")))
        self.command("play_clip", self._play_clip)
        self.command("show_puzzle_3", lambda p: screen.show(PUZZLE_3))
        self.command("show_tim_ferris", lambda p: screen.show(TIM_FERRIS))
        return screen

    def _play_clip(self, payload: Message) -> None:
        clip_key = payload.get("clip")
        if clip_key is None and isinstance(payload.get("payload"), dict):
            clip_key = payload["payload"].get("clip")
        if not self.screen.play_clip(clip_key):
            raise CommandError(f"Unknown clip: {clip_key}")

    def manifest(self) -> dict[str, Any]:
        return {
            "videos": self.screen.video_manifest(),
            "puzzle3Url": self.settings.screen_right.puzzle3_url,
            "mode": self.screen.mode,
        }


class ImmersionScreenBinding(ScreenBinding):
    name = "screen-immersion"

    @property
    def section(self):
        return self.settings.screen_immersion

    def build(self) -> ImmersionScreen:
        return ImmersionScreen(self.settings.screen_immersion)
