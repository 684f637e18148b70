"""
Wire messages.

Display clients and the Room Controller both speak JSON text frames shaped
{"type": ..., ...}. Anything that does not parse into such an object is
dropped by the caller.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

logger = logging.getLogger(__name__)

# Display -> prop
READY = "ready"
ACTIVATE = "activate"
RESET = "reset"
FORCE_SOLVE = "forceSolve"

# Room Controller message types
PROP_ONLINE = "prop_online"
PROP_OFFLINE = "prop_offline"
PROP_UPDATE = "prop_update"
CMD = "cmd"
CMD_ACK = "cmd_ack"
HELLO = "hello"


def parse_message(raw: str | bytes) -> dict[str, Any] | None:
    """Decode a text frame into a message dict, or None if malformed."""
    try:
        message = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Dropping unparseable message")
        return None
    if not isinstance(message, dict) or not isinstance(message.get("type"), str):
        logger.debug("Dropping message without a type")
        return None
    return message


def encode(message: dict[str, Any]) -> str:
    return json.dumps(message)


def timestamp_ms() -> int:
    """Epoch milliseconds, the Room Controller's timestamp unit."""
    return int(time.time() * 1000)


def prop_online(prop_id: str) -> dict[str, Any]:
    return {"type": PROP_ONLINE, "payload": {"propId": prop_id, "timestamp": timestamp_ms()}}


def prop_offline(prop_id: str) -> dict[str, Any]:
    return {"type": PROP_OFFLINE, "payload": {"propId": prop_id, "timestamp": timestamp_ms()}}


def prop_update(prop_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": PROP_UPDATE,
        "payload": {"propId": prop_id, "timestamp": timestamp_ms(), "changes": changes},
    }


def cmd_ack(request_id: Any, success: bool, error: str | None = None) -> dict[str, Any]:
    return {"type": CMD_ACK, "payload": {"requestId": request_id, "success": success, "error": error}}
