"""Villain screen: plays clips on command and shows the hack overlay."""

from __future__ import annotations

import logging
from typing import Any

from ..config.settings import VillainScreenSettings
from ..core.events import PLAY_CLIP
from .base import ScreenController

logger = logging.getLogger(__name__)


class VillainScreen(ScreenController):
    name = "screen-villain"
    MODES = ("idle", "clip", "hack")

    def __init__(self, config: VillainScreenSettings) -> None:
        super().__init__()
        self.config = config
        self.current_clip: str | None = None

    def video_manifest(self) -> list[str]:
        return list(self.config.videos.values())

    def play_clip(self, filename: str) -> None:
        logger.info(f"[{self.name}] Playing clip {filename}")
        self._set_mode("clip")
        self.current_clip = filename
        self.emit_state()
        self.emit_event(PLAY_CLIP, filename=filename)

    def play_intro(self) -> None:
        self.play_clip(self.config.videos["intro"])

    def clip_ended(self, filename: str | None = None) -> None:
        logger.info(f"[{self.name}] Clip ended: {filename}")
        self._set_mode("idle")
        self.current_clip = None
        self.emit_state()

    def hack_mode(self) -> None:
        self.current_clip = None
        super().hack_mode()

    def hack_resolved(self) -> None:
        self.current_clip = None
        super().hack_resolved()

    def _on_reset(self) -> None:
        self.current_clip = None

    def _snapshot(self) -> dict[str, Any]:
        return {"currentClip": self.current_clip}
