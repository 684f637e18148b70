"""Exception types for propctl.

Wrong player input is never an exception; these cover programming and
deployment problems only.
"""


class PropError(Exception):
    """Base class for propctl errors."""


class ConfigurationError(PropError):
    """Settings are inconsistent (e.g. a lever code of the wrong length)."""


class HardwareError(PropError):
    """A GPIO device could not be claimed or driven."""


class CommandError(PropError):
    """A Room Controller command was unknown or missing an argument."""
