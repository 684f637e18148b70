"""Mock hardware implementations for mock mode."""

from .input import (
    SimulatedButtonPanel,
    SimulatedEncoders,
    SimulatedJoystick,
    SimulatedKeypad,
    SimulatedLevers,
    SimulatedNavigation,
)
from .output import SimulatedBeeper, SimulatedLedBank

__all__ = [
    "SimulatedButtonPanel",
    "SimulatedEncoders",
    "SimulatedJoystick",
    "SimulatedKeypad",
    "SimulatedLevers",
    "SimulatedNavigation",
    "SimulatedBeeper",
    "SimulatedLedBank",
]
