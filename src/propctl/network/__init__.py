"""Display WebSocket hub and Room Controller bridge."""

from .hub import ClientConnection, ConnectionHub
from .room_controller import RoomControllerBridge, backoff_delays

__all__ = [
    "ClientConnection",
    "ConnectionHub",
    "RoomControllerBridge",
    "backoff_delays",
]
