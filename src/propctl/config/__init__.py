"""Configuration for propctl."""

from .settings import Settings, get_settings
from .hardware import HardwareConfig, get_hardware_config

__all__ = ["Settings", "get_settings", "HardwareConfig", "get_hardware_config"]
