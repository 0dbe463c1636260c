"""
RendererClient - renderer side of the live value channel.

A renderer connects, answers pings and applies each received value to
its ``u_inline1f`` uniform. This client does the protocol part; the
caller supplies what to do with the value.

Usage:
    async with RendererClient("ws://localhost:8765", on_value=apply) as client:
        await client.wait_closed()
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from shadernudge import log
from shadernudge.live import messages
from shadernudge.live.channel import DEFAULT_HOST, DEFAULT_PORT

Frame = Tuple[messages.MessageType, Dict[str, Any]]

DEFAULT_HISTORY = 1000


class RendererClient:
    """
    Args:
        uri: channel address.
        on_value: called with every received uniform value.
        answer_pings: reply to pings with pongs.
        history: how many recent frames and values are kept in
            ``received`` and ``values`` (and queued for ``next_frame``).
    """

    def __init__(
        self,
        uri: str = f"ws://{DEFAULT_HOST}:{DEFAULT_PORT}",
        on_value: Optional[Callable[[float], None]] = None,
        answer_pings: bool = True,
        history: int = DEFAULT_HISTORY,
    ):
        self.uri = uri
        self.on_value = on_value
        self.answer_pings = answer_pings
        self.history = history

        self.received: List[Frame] = []
        self.values: List[float] = []

        self._socket: Optional[ClientConnection] = None
        self._reader: Optional[asyncio.Task] = None
        self._frames: asyncio.Queue = asyncio.Queue(maxsize=history)
        self._replies: Set[asyncio.Task] = set()

    async def __aenter__(self) -> "RendererClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        return self._reader is not None and not self._reader.done()

    async def connect(self) -> None:
        self._socket = await connect(self.uri)
        self._reader = asyncio.create_task(self._read_loop())
        log.info(f"[RendererClient] Connected to {self.uri}")

    async def close(self) -> None:
        for task in list(self._replies):
            task.cancel()
        if self._socket is not None:
            await self._socket.close()
        if self._reader is not None:
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
        self._socket = None
        self._reader = None

    async def wait_closed(self) -> None:
        if self._reader is not None:
            await self._reader

    async def send_raw(self, text: str) -> None:
        await self._socket.send(text)

    async def send_ping(self, message: str = "Hello from renderer") -> None:
        await self._socket.send(messages.ping(message))

    async def next_frame(self, timeout: float = 5.0) -> Frame:
        """Next received frame of any type."""
        return await asyncio.wait_for(self._frames.get(), timeout=timeout)

    async def next_of_type(self, message_type: messages.MessageType, timeout: float = 5.0) -> Dict[str, Any]:
        """Skip frames until one of ``message_type`` arrives; returns its data."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            frame_type, data = await self.next_frame(max(0.0, deadline - loop.time()))
            if frame_type is message_type:
                return data

    async def _read_loop(self) -> None:
        try:
            async for raw in self._socket:
                self._handle(raw)
        except ConnectionClosed as e:
            log.debug(f"[RendererClient] Connection closed: {e}")

    def _handle(self, raw) -> None:
        try:
            frame = messages.decode(raw)
        except messages.MessageError as e:
            log.warn(f"[RendererClient] Bad frame from editor: {e}")
            return

        message_type, data = frame
        _append_bounded(self.received, frame, self.history)
        if self._frames.full():
            self._frames.get_nowait()
        self._frames.put_nowait(frame)

        if message_type is messages.MessageType.PING:
            if self.answer_pings:
                task = asyncio.get_running_loop().create_task(self._reply_pong(data))
                self._replies.add(task)
                task.add_done_callback(self._replies.discard)
        elif message_type is messages.MessageType.UPDATE_UNIFORM:
            try:
                value = float(data["value"])
            except (KeyError, TypeError, ValueError):
                log.warn(f"[RendererClient] update_uniform without a numeric value: {data}")
                return
            _append_bounded(self.values, value, self.history)
            if self.on_value is not None:
                try:
                    self.on_value(value)
                except Exception as e:
                    log.error(e, "[RendererClient] on_value failed")
        elif message_type is messages.MessageType.ERROR:
            log.warn(f"[RendererClient] Editor reported error: {data.get('message')}")

    async def _reply_pong(self, data: Dict[str, Any]) -> None:
        try:
            await self._socket.send(messages.pong(data))
        except ConnectionClosed:
            pass


def _append_bounded(items: list, item, limit: int) -> None:
    items.append(item)
    if len(items) > limit:
        del items[: len(items) - limit]
