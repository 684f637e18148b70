"""propctl - escape-room prop controllers."""

__version__ = "0.1.0"
