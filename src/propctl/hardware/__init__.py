"""Prop I/O: device interfaces, gpiozero drivers and the device provider."""

from .base import (
    Beeper,
    ButtonPanel,
    Device,
    EncoderPair,
    Joystick,
    Keypad,
    LedBank,
    LeverBank,
    NavigationButtons,
)
from .provider import DeviceFactory, probe_gpio

__all__ = [
    "Beeper",
    "ButtonPanel",
    "Device",
    "EncoderPair",
    "Joystick",
    "Keypad",
    "LedBank",
    "LeverBank",
    "NavigationButtons",
    "DeviceFactory",
    "probe_gpio",
]
