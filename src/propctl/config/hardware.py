"""
Hardware pin mappings and configuration.

GPIO pin assignments (BCM numbering) for every prop.

Deployment precondition: the Props Pi reuses button pins between Simon,
World Map and Missile. Only one of those prop processes may own the pins at a
time; nothing in software arbitrates this.
"""

from dataclasses import dataclass, field


@dataclass
class SimonPins:
    """Button input and LED output per Simon button id."""
    buttons: dict[int, tuple[int, int]] = field(default_factory=lambda: {
        # id: (button pin, led pin)
        1: (16, 0),
        2: (19, 1),
        3: (20, 22),
        4: (26, 23),
        5: (5, 2),
        6: (6, 3),
        7: (13, 4),
        8: (27, 7),
        9: (17, 8),
        10: (14, 9),
    })
    pull_up: bool = True
    bounce_time: float = 0.05


@dataclass
class EncoderPins:
    """Rotary encoder CLK/DT pins for the crosshair."""
    x: tuple[int, int] = (16, 20)
    y: tuple[int, int] = (19, 26)


@dataclass
class WiegandPins:
    """Wiegand keypad data lines."""
    d0: int = 17  # green wire
    d1: int = 27  # white wire

    # Silence that ends a frame
    frame_gap: float = 0.05


@dataclass
class GadgetLedPins:
    """One LED per solved situation."""
    leds: tuple[int, ...] = (24, 25, 12)


@dataclass
class VehiclePins:
    """Vehicle navigation buttons and sparse lever switch map."""
    left: int = 5
    right: int = 6
    validate: int = 13
    bounce_time: float = 0.05

    # Per lever: {position: gpio pin}; only positions used by codes are wired
    levers: tuple[dict[int, int], ...] = (
        {2: 2, 4: 3, 8: 4},
        {3: 7, 7: 8, 9: 9},
        {2: 10, 4: 11, 8: 14},
        {1: 15, 5: 18, 6: 21},
    )


@dataclass
class JoystickPins:
    """8-way joystick microswitches (diagonals close two switches)."""
    up: int = 16
    down: int = 20
    left: int = 19
    right: int = 26
    bounce_time: float = 0.08

    # Window after the first edge before the switch combination is sampled
    settle_time: float = 0.03


@dataclass
class HardwareConfig:
    """Complete hardware configuration."""
    simon: SimonPins = field(default_factory=SimonPins)
    encoders: EncoderPins = field(default_factory=EncoderPins)
    keypad: WiegandPins = field(default_factory=WiegandPins)
    gadget_leds: GadgetLedPins = field(default_factory=GadgetLedPins)
    vehicle: VehiclePins = field(default_factory=VehiclePins)
    joystick: JoystickPins = field(default_factory=JoystickPins)


# Default hardware configuration
DEFAULT_CONFIG = HardwareConfig()


def get_hardware_config() -> HardwareConfig:
    """Get the hardware configuration."""
    return DEFAULT_CONFIG
