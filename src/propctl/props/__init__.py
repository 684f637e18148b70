"""Per-prop bindings and the registry used by the CLI."""

from .base import PropBinding, PuzzleBinding
from .gadget_code import GadgetCodeBinding
from .missile import MissileBinding
from .screens import ImmersionScreenBinding, RightScreenBinding, ScreenBinding, VillainScreenBinding
from .simon import SimonBinding
from .vehicle import VehicleBinding
from .world_map import WorldMapBinding

PROPS: dict[str, type[PropBinding]] = {
    "simon": SimonBinding,
    "world-map": WorldMapBinding,
    "gadget-code": GadgetCodeBinding,
    "vehicle": VehicleBinding,
    "missile": MissileBinding,
    "screen-villain": VillainScreenBinding,
    "screen-right": RightScreenBinding,
    "screen-immersion": ImmersionScreenBinding,
}

__all__ = [
    "PROPS",
    "PropBinding",
    "PuzzleBinding",
    "ScreenBinding",
    "SimonBinding",
    "WorldMapBinding",
    "GadgetCodeBinding",
    "VehicleBinding",
    "MissileBinding",
    "VillainScreenBinding",
    "RightScreenBinding",
    "ImmersionScreenBinding",
]
