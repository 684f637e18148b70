"""Immersion screen: an ambient spy dashboard that only reacts to hacks."""

from ..config.settings import ImmersionScreenSettings
from .base import ScreenController


class ImmersionScreen(ScreenController):
    name = "screen-immersion"

    def __init__(self, config: ImmersionScreenSettings) -> None:
        super().__init__()
        self.config = config
