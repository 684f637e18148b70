"""Passive display screens."""

from .base import ScreenController
from .immersion import ImmersionScreen
from .right import RightScreen
from .villain import VillainScreen

__all__ = ["ScreenController", "ImmersionScreen", "RightScreen", "VillainScreen"]
