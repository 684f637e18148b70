"""
Proximity beeper on the pygame mixer.

One short sine beep is rendered per axis at startup: the x axis plays on
the left channel and the y axis on the right, so the player can tell which
encoder is getting close.
"""

import array
import logging
import math
from typing import Any

from .base import Beeper
from ..errors import HardwareError

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100

_pygame = None


def _get_pygame() -> Any:
    """Import pygame on first use so the dependency stays optional."""
    global _pygame
    if _pygame is None:
        import pygame
        _pygame = pygame
    return _pygame


def sine(t: float, freq: float) -> float:
    """Sine wave oscillator."""
    return math.sin(2 * math.pi * freq * t)


def render_beep(frequency: float, duration_ms: int, channel: str, volume: float = 0.5) -> array.array:
    """
    Render an interleaved stereo beep.

    Args:
        frequency: Tone in Hz
        duration_ms: Length of the beep
        channel: "left", "right" or "both"
        volume: Peak amplitude 0-1

    Returns:
        Signed 16-bit samples, L/R interleaved
    """
    count = int(SAMPLE_RATE * duration_ms / 1000)
    fade = max(1, int(SAMPLE_RATE * 0.005))
    stereo = array.array('h')
    for i in range(count):
        t = i / SAMPLE_RATE
        # Short linear fade in/out to avoid clicks
        env = min(1.0, i / fade, (count - i) / fade)
        val = int(sine(t, frequency) * env * volume * 32767)
        stereo.append(val if channel in ("left", "both") else 0)
        stereo.append(val if channel in ("right", "both") else 0)
    return stereo


class PygameBeeper(Beeper):
    """Beeps on the Pi's audio output."""

    CHANNELS = {"x": "left", "y": "right"}

    def __init__(self, frequency: int = 800, duration_ms: int = 60) -> None:
        try:
            pygame = _get_pygame()
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 2, 512)
            pygame.mixer.init()
        except Exception as e:
            raise HardwareError(f"audio unavailable: {e}") from e

        self._sounds = {
            axis: pygame.mixer.Sound(buffer=render_beep(frequency, duration_ms, channel))
            for axis, channel in self.CHANNELS.items()
        }
        logger.info(f"Audio beeper initialized ({frequency} Hz, {duration_ms} ms)")

    def beep(self, axis: str) -> None:
        sound = self._sounds.get(axis)
        if sound is not None:
            sound.play()

    def close(self) -> None:
        pygame = _get_pygame()
        if pygame.mixer.get_init():
            pygame.mixer.quit()
