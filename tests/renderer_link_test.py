import asyncio
import time

import pytest

from shadernudge.core.errors import ChannelStartFailure
from shadernudge.live.channel import LiveValueChannel
from shadernudge.live.channel_thread import ChannelThread
from shadernudge.live.renderer_client import RendererClient
from shadernudge.live.renderer_link import RendererLink

HOST = "127.0.0.1"


def _link():
    return RendererLink(ChannelThread(LiveValueChannel(HOST, 0)))


def _uri(link):
    return f"ws://{HOST}:{link.channel_thread.channel.port}"


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.01)


async def async_wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


def test_connection_listener_is_called_immediately():
    link = _link()
    events = []
    link.on_connection_change(events.append)
    assert events == [False]


def test_status_before_and_after_start():
    link = _link()
    assert link.get_connection_status() == {
        "is_server_running": False,
        "is_blender_connected": False,
        "client_count": 0,
    }
    link.start()
    try:
        link.start()
        assert link.get_connection_status()["is_server_running"] is True
        assert link.is_connected() is False
    finally:
        link.stop()
    assert link.get_connection_status()["is_server_running"] is False


def test_start_failure_propagates():
    taken = _link()
    taken.start()
    try:
        port = taken.channel_thread.channel.port
        link = RendererLink(ChannelThread(LiveValueChannel(HOST, port)))
        with pytest.raises(ChannelStartFailure):
            link.start()
        assert link.get_connection_status()["is_server_running"] is False
        # Thread was shut down; stop is harmless
        link.stop()
    finally:
        taken.stop()


def test_send_without_renderer_skips_value_listeners():
    link = _link()
    values = []
    link.on_value_change(values.append)
    link.start()
    try:
        link.send_uniform_value(1.0)
    finally:
        link.stop()
    assert values == []


def test_missing_renderer_is_reported_once_per_disconnect(caplog):
    def skip_warnings():
        return [r for r in caplog.records if "no renderer connected" in r.getMessage() and r.levelname == "WARNING"]

    link = _link()
    link.start()
    try:
        for value in (0.1, 0.2, 0.3):
            link.send_uniform_value(value)
        assert len(skip_warnings()) == 1

        async def renderer():
            async with RendererClient(_uri(link)):
                await async_wait_until(link.is_connected)

        asyncio.run(renderer())
        wait_until(lambda: not link.is_connected())

        link.send_uniform_value(0.4)
        link.send_uniform_value(0.5)
        assert len(skip_warnings()) == 2
    finally:
        link.stop()


def test_renderer_round_trip():
    link = _link()
    events = []
    values = []
    link.on_connection_change(events.append)
    link.on_value_change(values.append)
    link.start()
    try:
        async def renderer():
            async with RendererClient(_uri(link)) as client:
                await async_wait_until(link.is_connected)
                status = link.get_connection_status()
                assert status["is_blender_connected"] is True
                assert status["client_count"] == 1

                link.send_uniform_value(0.75)
                link.send_uniform_value(-1.5)
                await async_wait_until(lambda: len(client.values) == 2)
                return client.values

        received = asyncio.run(renderer())
        assert received == [0.75, -1.5]
        wait_until(lambda: not link.is_connected())
    finally:
        link.stop()

    assert values == [0.75, -1.5]
    assert events == [False, True, False]


def test_failing_value_listener_does_not_stop_others():
    link = _link()
    seen = []

    def broken(value):
        raise RuntimeError("listener bug")

    link.on_value_change(broken)
    link.on_value_change(seen.append)
    link.start()
    try:
        async def renderer():
            async with RendererClient(_uri(link)):
                await async_wait_until(link.is_connected)
                link.send_uniform_value(2.0)

        asyncio.run(renderer())
    finally:
        link.stop()
    assert seen == [2.0]


def test_unsubscribe_and_debug_info():
    link = _link()
    unsubscribe_connection = link.on_connection_change(lambda connected: None)
    unsubscribe_value = link.on_value_change(lambda value: None)
    info = link.get_debug_info()
    assert info["callback_counts"] == {"connection": 1, "value": 1}
    assert info["server_status"] == {"is_running": False, "client_count": 0}

    unsubscribe_connection()
    unsubscribe_value()
    unsubscribe_value()
    assert link.get_debug_info()["callback_counts"] == {"connection": 0, "value": 0}


def test_channel_thread_send_when_not_started_is_noop():
    thread = ChannelThread(LiveValueChannel(HOST, 0))
    thread.send_uniform_update(1.0)
    thread.stop()
    assert thread.is_running() is False
