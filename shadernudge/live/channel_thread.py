"""
ChannelThread - runs a LiveValueChannel on its own event loop.

Qt owns the main thread, so the channel gets a private asyncio loop in a
daemon thread. Lifecycle calls block the caller until the channel
reports back (bounded by the channel timeouts); broadcasts are handed to
the loop and return immediately.

Connection listeners registered on the channel are called from the
channel thread. Qt code should forward them through a signal.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Callable, Optional

from shadernudge import log
from shadernudge.core.errors import ChannelStartFailure
from shadernudge.live.channel import LiveValueChannel

# Extra seconds on top of the channel's own timeouts for the thread hop
_HANDOFF_MARGIN_S = 1.0


class ChannelThread:
    def __init__(self, channel: Optional[LiveValueChannel] = None):
        self._channel = channel or LiveValueChannel()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def channel(self) -> LiveValueChannel:
        return self._channel

    def is_running(self) -> bool:
        return self._channel.is_running()

    def start(self) -> None:
        """
        Start the loop thread and the channel.

        Raises:
            ChannelStartFailure: the channel failed to bind or timed out.
        """
        self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(self._channel.start(), self._loop)
        try:
            future.result(timeout=self._channel.start_timeout + _HANDOFF_MARGIN_S)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            self._shutdown_loop()
            raise ChannelStartFailure(self._channel.host, self._channel.port, "start did not complete") from e
        except ChannelStartFailure:
            self._shutdown_loop()
            raise

    def stop(self) -> None:
        """Stop the channel and shut the loop thread down."""
        if self._loop is None:
            return
        future = asyncio.run_coroutine_threadsafe(self._channel.stop(), self._loop)
        try:
            future.result(timeout=self._channel.stop_timeout + _HANDOFF_MARGIN_S)
        except concurrent.futures.TimeoutError:
            future.cancel()
            log.warn("[ChannelThread] Channel stop did not complete in time")
        except Exception as e:
            log.error(e, "[ChannelThread] Channel stop failed")
        self._shutdown_loop()

    def send_uniform_update(self, value: float) -> None:
        """Hand a broadcast to the channel loop; frames keep call order."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(self._channel.send_uniform_update, value)
        except RuntimeError:
            # Loop closed between the check and the call
            pass

    def get_connection_status(self) -> dict:
        return self._channel.get_connection_status()

    def on_connection_change(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        return self._channel.on_connection_change(callback)

    def _ensure_loop(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            args=(self._loop,),
            name="LiveValueChannel",
            daemon=True,
        )
        self._thread.start()

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()

    def _shutdown_loop(self) -> None:
        loop, thread = self._loop, self._thread
        self._loop = None
        self._thread = None
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=_HANDOFF_MARGIN_S)
