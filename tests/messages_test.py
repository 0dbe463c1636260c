import json

import pytest

from shadernudge.live import messages
from shadernudge.live.messages import MessageError, MessageType, UnknownMessageType


def test_uniform_update_frame():
    frame = json.loads(messages.uniform_update(0.5))
    assert frame == {"type": "update_uniform", "data": {"value": 0.5}}


def test_ping_carries_greeting_and_ms_timestamp():
    before = messages.now_ms()
    frame = json.loads(messages.ping())
    assert frame["type"] == "ping"
    assert frame["data"]["message"] == "Hello from Ernst Editor!"
    assert frame["data"]["timestamp"] >= before


def test_pong_echoes_ping_data_with_fresh_timestamp():
    frame = json.loads(messages.pong({"message": "hi", "timestamp": 1}))
    assert frame["type"] == "pong"
    assert frame["data"]["message"] == "hi"
    assert frame["data"]["timestamp"] > 1


def test_error_frame_default_code():
    frame = json.loads(messages.error("Invalid JSON format"))
    assert frame == {"type": "error", "data": {"message": "Invalid JSON format", "code": "ERNST_ERROR"}}


def test_decode_known_types():
    message_type, data = messages.decode('{"type": "pong", "data": {"timestamp": 5}}')
    assert message_type is MessageType.PONG
    assert data == {"timestamp": 5}

    message_type, data = messages.decode(b'{"type": "ping"}')
    assert message_type is MessageType.PING
    assert data == {}


def test_decode_rejects_bad_json():
    with pytest.raises(MessageError) as exc_info:
        messages.decode("{not json")
    assert str(exc_info.value) == "Invalid JSON format"


def test_decode_rejects_non_objects():
    for raw in ("5", "[1, 2]", '{"type": "ping", "data": 3}'):
        with pytest.raises(MessageError):
            messages.decode(raw)


def test_decode_unknown_type():
    with pytest.raises(UnknownMessageType) as exc_info:
        messages.decode('{"type": "teleport", "data": {}}')
    assert str(exc_info.value) == "Unknown message type: teleport"
    assert exc_info.value.message_type == "teleport"
