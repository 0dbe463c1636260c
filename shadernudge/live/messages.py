"""
Wire messages of the live value channel.

One JSON object per WebSocket text frame:

    {"type": "update_uniform", "data": {"value": 0.5}}
    {"type": "ping",  "data": {"message": "...", "timestamp": 1700000000000}}
    {"type": "pong",  "data": {"message": "...", "timestamp": 1700000000000}}
    {"type": "error", "data": {"message": "...", "code": "ERNST_ERROR"}}

The renderer binds the value to a uniform with a fixed name, so the
update carries only the value.
"""

from __future__ import annotations

import json
import time
from enum import Enum
from typing import Any, Dict, Optional

ERROR_CODE = "ERNST_ERROR"
HELLO_MESSAGE = "Hello from Ernst Editor!"


class MessageType(str, Enum):
    UPDATE_UNIFORM = "update_uniform"
    PING = "ping"
    PONG = "pong"
    ERROR = "error"


class MessageError(ValueError):
    """Frame is not valid JSON or not a message object."""

    pass


class UnknownMessageType(MessageError):
    def __init__(self, message_type: Any) -> None:
        super().__init__(f"Unknown message type: {message_type}")
        self.message_type = message_type


def now_ms() -> int:
    return int(time.time() * 1000)


def encode(message_type: MessageType, data: Dict[str, Any]) -> str:
    return json.dumps({"type": message_type.value, "data": data})


def uniform_update(value: float) -> str:
    return encode(MessageType.UPDATE_UNIFORM, {"value": float(value)})


def ping(message: str = HELLO_MESSAGE) -> str:
    return encode(MessageType.PING, {"message": message, "timestamp": now_ms()})


def pong(ping_data: Optional[Dict[str, Any]] = None) -> str:
    """Pong echoing the ping's data with a fresh timestamp."""
    data = dict(ping_data or {})
    data["timestamp"] = now_ms()
    return encode(MessageType.PONG, data)


def error(message: str, code: str = ERROR_CODE) -> str:
    return encode(MessageType.ERROR, {"message": message, "code": code})


def decode(raw: str | bytes) -> tuple[MessageType, Dict[str, Any]]:
    """
    Parse one frame.

    Raises:
        MessageError: malformed JSON or not a {"type", "data"} object.
        UnknownMessageType: ``type`` is not one of MessageType.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MessageError("Invalid JSON format") from e
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MessageError("Invalid JSON format") from e

    if not isinstance(msg, dict):
        raise MessageError("Invalid message format")

    msg_type = msg.get("type")
    try:
        message_type = MessageType(msg_type)
    except ValueError:
        raise UnknownMessageType(msg_type) from None

    data = msg.get("data")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MessageError("Invalid message format")
    return message_type, data
