"""Puzzle state machines."""

from .gadget_code import GadgetCodePuzzle, GadgetState
from .missile import MissilePuzzle, MissileState, direction_matches, opposite
from .simon import SimonPuzzle, SimonState
from .vehicle import VehiclePuzzle, VehicleState
from .world_map import WorldMapPuzzle, WorldMapState, beep_interval

__all__ = [
    "GadgetCodePuzzle",
    "GadgetState",
    "MissilePuzzle",
    "MissileState",
    "direction_matches",
    "opposite",
    "SimonPuzzle",
    "SimonState",
    "VehiclePuzzle",
    "VehicleState",
    "WorldMapPuzzle",
    "WorldMapState",
    "beep_interval",
]
