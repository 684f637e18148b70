"""
Puzzle 3 - Gadget Code.

A linear run of video "situations", each unlocked by a fixed-length keypad
code. The display plays the clips and reports back when each one ends;
player input is only taken while a situation waits for its code.

    inactive -> intro -> playing_clip(situation) -> situation
    situation --submit--> playing_clip(correct | wrong)
    correct end -> next situation clip, or the solved clip -> solved
    wrong end   -> situation
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..config.settings import GadgetCodeSettings
from ..core.events import CODE_PROGRESS, CODE_RESULT, PLAY_CLIP, SHOW_IDLE
from ..core.state import InputEvent, PuzzleMachine
from ..core.timers import Scheduler
from ..hardware.base import LedBank

logger = logging.getLogger(__name__)

DIGITS = frozenset("0123456789")


class GadgetState(str, Enum):
    INACTIVE = "inactive"
    INTRO = "intro"
    PLAYING_CLIP = "playing_clip"
    SITUATION = "situation"
    SOLVED = "solved"


class GadgetCodePuzzle(PuzzleMachine):
    """Keypad code entry sequenced by video clips."""

    name = "gadget-code"
    State = GadgetState
    TRANSITIONS = [
        (GadgetState.INACTIVE, GadgetState.INTRO),
        (GadgetState.INTRO, GadgetState.PLAYING_CLIP),
        (GadgetState.PLAYING_CLIP, GadgetState.SITUATION),
        (GadgetState.SITUATION, GadgetState.PLAYING_CLIP),
    ]
    ACCEPTS = {
        GadgetState.INTRO: frozenset({"clip_ended"}),
        GadgetState.PLAYING_CLIP: frozenset({"clip_ended", "situation_clip_ended"}),
        GadgetState.SITUATION: frozenset({"digit", "submit", "delete", "clear"}),
    }

    def __init__(self, config: GadgetCodeSettings, leds: LedBank, loop: Scheduler | None = None) -> None:
        self.config = config
        self.leds = leds
        self.current_situation = 0
        self.code_buffer = ""
        self._clip: str | None = None
        super().__init__(loop)

    @property
    def total_situations(self) -> int:
        return len(self.config.situations)

    @property
    def current_clip(self) -> str | None:
        """Clip id the display is expected to be playing."""
        return self._clip

    def video_manifest(self) -> list[str]:
        """Every clip the display should preload."""
        videos = self.config.videos
        return [s.video for s in self.config.situations] + [
            videos.intro,
            videos.correct,
            videos.wrong,
            videos.solved,
            videos.idle,
        ]

    # -- clips ----------------------------------------------------------

    def _play(self, filename: str, clip_id: str) -> None:
        self._clip = clip_id
        self.emit_event(PLAY_CLIP, filename=filename, clipId=clip_id)

    def _play_situation(self) -> None:
        situation = self.config.situations[self.current_situation]
        logger.info(f"[{self.name}] Playing situation {self.current_situation + 1}: {situation.video}")
        self.transition(GadgetState.PLAYING_CLIP, announce=False)
        self._play(situation.video, f"situation-{self.current_situation + 1}")
        self.emit_state()

    def _enter_situation(self) -> None:
        self._clip = None
        self.code_buffer = ""
        logger.info(f"[{self.name}] Waiting for code input (situation {self.current_situation + 1})")
        self.transition(GadgetState.SITUATION, announce=False)
        self.emit_event(SHOW_IDLE, situationIndex=self.current_situation)
        self.emit_state()

    def _clip_ended(self, clip_id: object) -> None:
        if self.state is GadgetState.INTRO:
            if clip_id == "intro":
                self._play_situation()
            return

        if clip_id != self._clip:
            logger.debug(f"[{self.name}] Ignoring end of {clip_id!r} (playing {self._clip!r})")
            return

        if clip_id == "correct":
            if self.current_situation >= self.total_situations:
                self._play(self.config.videos.solved, "solved")
            else:
                self._play_situation()
        elif clip_id == "wrong":
            self._enter_situation()
        elif clip_id == "solved":
            self._clip = None
            logger.info(f"[{self.name}] SOLVED!")
            self._solve()
        elif isinstance(clip_id, str) and clip_id.startswith("situation-"):
            self._enter_situation()

    def _situation_clip_ended(self) -> None:
        if self._clip is not None and self._clip.startswith("situation-"):
            self._enter_situation()

    # -- code entry -----------------------------------------------------

    def _emit_progress(self) -> None:
        self.emit_event(CODE_PROGRESS, entered=len(self.code_buffer), total=self.config.code_length)

    def _digit(self, value: object) -> None:
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or value not in DIGITS:
            return
        if len(self.code_buffer) >= self.config.code_length:
            return
        self.code_buffer += value
        logger.debug(f"[{self.name}] Digit: {value} -> buffer: {self.code_buffer}")
        self._emit_progress()
        self.emit_state()

    def _delete(self) -> None:
        if not self.code_buffer:
            return
        self.code_buffer = self.code_buffer[:-1]
        self._emit_progress()
        self.emit_state()

    def _clear(self) -> None:
        self.code_buffer = ""
        self._emit_progress()
        self.emit_state()

    def _submit(self) -> None:
        if not self.code_buffer:
            return
        entered, self.code_buffer = self.code_buffer, ""
        expected = self.config.situations[self.current_situation].correct_code
        logger.info(f"[{self.name}] Code submitted for situation {self.current_situation + 1}")

        self.transition(GadgetState.PLAYING_CLIP, announce=False)
        if entered == expected:
            self.leds.set(self.current_situation, True)
            self.current_situation += 1
            self.emit_event(CODE_RESULT, correct=True, code=entered)
            self._play(self.config.videos.correct, "correct")
        else:
            self.emit_event(CODE_RESULT, correct=False, code=entered)
            self._play(self.config.videos.wrong, "wrong")
        self.emit_state()

    # -- hooks ----------------------------------------------------------

    def _on_activate(self) -> None:
        logger.info(f"[{self.name}] Playing intro")
        self.current_situation = 0
        self.code_buffer = ""
        self.leds.all_off()
        self.transition(GadgetState.INTRO, announce=False)
        self._play(self.config.videos.intro, "intro")
        self.emit_state()

    def _on_input(self, event: InputEvent) -> None:
        if event.kind == "clip_ended":
            self._clip_ended(event.value)
        elif event.kind == "situation_clip_ended":
            self._situation_clip_ended()
        elif event.kind == "digit":
            self._digit(event.value)
        elif event.kind == "submit":
            self._submit()
        elif event.kind == "delete":
            self._delete()
        elif event.kind == "clear":
            self._clear()

    def _on_force_solve(self) -> None:
        self.leds.all_on()
        self.current_situation = self.total_situations
        self.code_buffer = ""
        self._clip = None
        self.emit_event(PLAY_CLIP, filename=self.config.videos.solved, clipId="solved")

    def _on_reset(self) -> None:
        self.current_situation = 0
        self.code_buffer = ""
        self._clip = None
        self.leds.all_off()

    def _snapshot(self) -> dict[str, Any]:
        return {
            "currentSituation": self.current_situation,
            "totalSituations": self.total_situations,
            "codeLength": self.config.code_length,
            "codeProgress": len(self.code_buffer),
            "leds": self.leds.states(),
            "clip": self._clip,
        }

    def progress(self) -> float:
        return self.current_situation / self.total_situations
