"""
Wiegand keypad decoding.

Keypads send each key as a short burst of pulses on D0 (bit 0) or D1
(bit 1). A frame ends after a silence window:

    IDLE --pulse--> ACCUMULATING --pulse--> ACCUMULATING
    ACCUMULATING --silence--> DECODING --> IDLE

4-bit frames carry the key value directly. 8-bit frames carry the inverted
value in the high nibble as a check. Card frames (26+ bits) are ignored.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Sequence
import logging

from ..core.timers import Scheduler, TimerSet

logger = logging.getLogger(__name__)


KEY_CLEAR = "*"
KEY_SUBMIT = "#"


class WiegandState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    DECODING = "decoding"


def bits_to_int(bits: Sequence[int]) -> int:
    value = 0
    for bit in bits:
        value = (value << 1) | bit
    return value


def value_to_key(value: int) -> str | None:
    """0-9 are digits, 10 is "*", 11 is "#"."""
    if 0 <= value <= 9:
        return str(value)
    if value == 10:
        return KEY_CLEAR
    if value == 11:
        return KEY_SUBMIT
    return None


def decode_frame(bits: Sequence[int]) -> str | None:
    """Decode one complete frame into a key, or None if it is not a key."""
    count = len(bits)
    if count == 4:
        return value_to_key(bits_to_int(bits))
    if count == 8:
        high = bits_to_int(bits[:4])
        low = bits_to_int(bits[4:])
        if high != (~low & 0xF):
            logger.debug(f"Wiegand 8-bit check failed: {list(bits)}")
            return None
        return value_to_key(low)
    if count >= 26:
        logger.info("Card frame detected, ignoring")
        return None
    logger.debug(f"Unknown Wiegand bit count: {count}")
    return None


class WiegandDecoder:
    """Pulse accumulator with an owned silence window."""

    def __init__(
        self,
        on_key: Callable[[str], None],
        frame_gap: float = 0.05,
        loop: Scheduler | None = None,
    ) -> None:
        self._on_key = on_key
        self._frame_gap = frame_gap
        self._timers = TimerSet(loop, owner="wiegand")
        self._bits: list[int] = []
        self.state = WiegandState.IDLE

    @property
    def buffered_bits(self) -> int:
        return len(self._bits)

    def pulse(self, bit: int) -> None:
        """One falling edge on D0 (0) or D1 (1)."""
        if bit not in (0, 1):
            return
        self._bits.append(bit)
        self.state = WiegandState.ACCUMULATING
        # Each pulse pushes the end of frame out again
        self._timers.schedule("frame", self._frame_gap, self._decode)

    def _decode(self) -> None:
        self.state = WiegandState.DECODING
        bits, self._bits = self._bits, []
        key = decode_frame(bits)
        self.state = WiegandState.IDLE
        if key is not None:
            logger.debug(f"Keypad key: {key}")
            self._on_key(key)

    def close(self) -> None:
        self._timers.cancel_all()
        self._bits.clear()
        self.state = WiegandState.IDLE
