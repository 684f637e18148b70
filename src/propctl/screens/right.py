"""
Right screen: Tim Ferris clips or the mirrored Puzzle 3 display.

Hack mode remembers the mode it interrupted and restores it when the hack
is resolved.
"""

from __future__ import annotations

import logging
from typing import Any

from ..config.settings import RightScreenSettings
from ..core.events import MODE_CHANGE, PLAY_CLIP
from .base import ScreenController

logger = logging.getLogger(__name__)

TIM_FERRIS = "tim-ferris"
PUZZLE_3 = "puzzle-3"


class RightScreen(ScreenController):
    name = "screen-right"
    MODES = (TIM_FERRIS, PUZZLE_3, "hack")
    DEFAULT_MODE = TIM_FERRIS

    def __init__(self, config: RightScreenSettings) -> None:
        super().__init__()
        self.config = config

    def video_manifest(self) -> list[str]:
        return list(self.config.videos.values())

    def _announce_mode(self) -> None:
        self.emit_event(MODE_CHANGE, mode=self.mode)
        self.emit_state()

    def show(self, mode: str) -> None:
        """Switch between the Tim Ferris and Puzzle 3 views."""
        if mode not in (TIM_FERRIS, PUZZLE_3):
            return
        self._set_mode(mode)
        self._mode_before_hack = mode
        self._announce_mode()

    def switch_mode(self) -> None:
        """Toggle views; ignored during a hack."""
        if self.in_hack:
            return
        self.show(PUZZLE_3 if self.mode == TIM_FERRIS else TIM_FERRIS)

    def play_clip(self, clip_key: str) -> bool:
        """Play a Tim Ferris clip by key; False if the key is unknown."""
        filename = self.config.videos.get(clip_key)
        if filename is None:
            logger.info(f"[{self.name}] Unknown clip key: {clip_key}")
            return False
        if self.mode == PUZZLE_3:
            self.show(TIM_FERRIS)
        logger.info(f"[{self.name}] Playing Tim Ferris clip: {clip_key} -> {filename}")
        self.emit_event(PLAY_CLIP, filename=filename, clipId=f"tf-{clip_key}")
        return True

    def _restore_mode(self) -> str:
        return self._mode_before_hack

    def hack_resolved(self) -> None:
        super().hack_resolved()
        self.emit_event(MODE_CHANGE, mode=self.mode)

    def reset(self) -> None:
        super().reset()
        self.emit_event(MODE_CHANGE, mode=self.mode)

    def _snapshot(self) -> dict[str, Any]:
        return {"puzzle3Url": self.config.puzzle3_url}
