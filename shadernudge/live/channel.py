"""
LiveValueChannel - local WebSocket server streaming uniform values.

External renderers (a Blender add-on, a preview window) connect to
ws://localhost:8765 and receive an ``update_uniform`` frame every time
the nudged value changes.

Usage:
    channel = LiveValueChannel()
    await channel.start()
    channel.send_uniform_update(0.5)
    await channel.stop()

All methods must be called on the event loop that runs the channel.
From a Qt application use ChannelThread instead.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from shadernudge import log
from shadernudge.core.errors import ChannelStartFailure
from shadernudge.live import messages

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8765
DEFAULT_TIMEOUT_S = 5.0


class ChannelState(Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass(eq=False)
class ChannelPeer:
    """One connected renderer."""

    socket: ServerConnection
    connected_at: datetime
    outbox: asyncio.Queue = field(default_factory=asyncio.Queue)
    writer: Optional[asyncio.Task] = None

    @property
    def is_open(self) -> bool:
        return self.socket.state is State.OPEN


class LiveValueChannel:
    """
    WebSocket server broadcasting uniform values to every connected peer.

    The channel counts as "connected" while at least one peer is attached;
    connection listeners are told only about empty <-> non-empty changes.

    Args:
        host: interface to listen on.
        port: port to listen on; 0 picks a free port (see ``port``).
        start_timeout: seconds ``start()`` may take before failing.
        stop_timeout: seconds ``stop()`` waits for sockets to close.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        start_timeout: float = DEFAULT_TIMEOUT_S,
        stop_timeout: float = DEFAULT_TIMEOUT_S,
    ):
        self.host = host
        self._requested_port = port
        self._bound_port: Optional[int] = None
        self.start_timeout = start_timeout
        self.stop_timeout = stop_timeout

        self._state = ChannelState.STOPPED
        self._server: Optional[Server] = None
        self._peers: Dict[ServerConnection, ChannelPeer] = {}
        self._lifecycle_lock = asyncio.Lock()
        self._connection_listeners: List[Callable[[bool], None]] = []

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def port(self) -> int:
        """Port actually bound while running, else the configured one."""
        if self._bound_port is not None:
            return self._bound_port
        return self._requested_port

    @property
    def peers(self) -> List[ChannelPeer]:
        return list(self._peers.values())

    def is_running(self) -> bool:
        return self._state is ChannelState.RUNNING

    def has_peers(self) -> bool:
        return bool(self._peers)

    # --- Lifecycle ---

    async def start(self) -> None:
        """
        Start listening. Does nothing if already running.

        Raises:
            ChannelStartFailure: bind failed or did not finish in time.
        """
        async with self._lifecycle_lock:
            if self._state is ChannelState.RUNNING:
                log.debug(f"[LiveValueChannel] Already running on port {self.port}")
                return

            self._state = ChannelState.STARTING
            try:
                self._server = await asyncio.wait_for(self._listen(), timeout=self.start_timeout)
            except asyncio.TimeoutError as e:
                self._state = ChannelState.STOPPED
                raise ChannelStartFailure(
                    self.host, self._requested_port, f"listen timed out after {self.start_timeout}s"
                ) from e
            except OSError as e:
                self._state = ChannelState.STOPPED
                raise ChannelStartFailure(self.host, self._requested_port, str(e)) from e

            sockets = list(self._server.sockets)
            self._bound_port = sockets[0].getsockname()[1] if sockets else self._requested_port
            self._state = ChannelState.RUNNING
            log.info(f"[LiveValueChannel] Listening on ws://{self.host}:{self.port}")

    async def _listen(self) -> Server:
        return await serve(self._handle_peer, self.host, self._requested_port)

    async def stop(self) -> None:
        """
        Close every peer and the listener.

        Returns after the sockets closed or ``stop_timeout`` elapsed,
        whichever comes first.
        """
        async with self._lifecycle_lock:
            if self._state is ChannelState.STOPPED:
                return
            self._state = ChannelState.STOPPING
            server = self._server
            self._server = None

            for peer in list(self._peers.values()):
                if peer.writer is not None:
                    peer.writer.cancel()

            if server is not None:
                server.close(close_connections=True)
                try:
                    await asyncio.wait_for(server.wait_closed(), timeout=self.stop_timeout)
                except asyncio.TimeoutError:
                    log.warn(f"[LiveValueChannel] Close timed out after {self.stop_timeout}s, aborting peers")
                    for peer in list(self._peers.values()):
                        if peer.socket.transport is not None:
                            peer.socket.transport.abort()

            # Handlers that did not get to run their cleanup
            had_peers = bool(self._peers)
            self._peers.clear()
            self._bound_port = None
            self._state = ChannelState.STOPPED
            if had_peers:
                self._notify_connection(False)
            log.info("[LiveValueChannel] Stopped")

    # --- Outbound ---

    def send_uniform_update(self, value: float) -> int:
        """
        Queue one ``update_uniform`` frame for every open peer.

        Never blocks and never raises for lack of peers.

        Returns:
            Number of peers the frame was queued for.
        """
        if not self._peers:
            return 0
        frame = messages.uniform_update(value)
        sent = 0
        for peer in list(self._peers.values()):
            if not peer.is_open:
                continue
            peer.outbox.put_nowait(frame)
            sent += 1
        return sent

    def get_connection_status(self) -> dict:
        return {
            "is_running": self._state is ChannelState.RUNNING,
            "client_count": len(self._peers),
        }

    def on_connection_change(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """
        Register a listener for peer-set empty/non-empty changes.

        Returns:
            Function removing the listener.
        """
        self._connection_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._connection_listeners:
                self._connection_listeners.remove(callback)

        return unsubscribe

    # --- Peer handling ---

    async def _handle_peer(self, websocket: ServerConnection) -> None:
        peer = ChannelPeer(socket=websocket, connected_at=datetime.now(timezone.utc))
        was_empty = not self._peers
        self._peers[websocket] = peer
        peer.writer = asyncio.create_task(self._drain(peer))
        log.info(f"[LiveValueChannel] Peer connected from {websocket.remote_address}. Total: {len(self._peers)}")

        peer.outbox.put_nowait(messages.ping())
        if was_empty:
            self._notify_connection(True)

        try:
            async for raw in websocket:
                self._process_message(peer, raw)
        except ConnectionClosed as e:
            log.debug(f"[LiveValueChannel] Peer closed with error: {e}")
        except Exception as e:
            log.error(f"[LiveValueChannel] Peer error: {e}")
        finally:
            self._remove_peer(peer)

    async def _drain(self, peer: ChannelPeer) -> None:
        """Writer task: sends queued frames in order."""
        while True:
            frame = await peer.outbox.get()
            try:
                await peer.socket.send(frame)
            except ConnectionClosed:
                return
            except Exception as e:
                log.warn(f"[LiveValueChannel] Send failed: {e}")
                return

    def _remove_peer(self, peer: ChannelPeer) -> None:
        if peer.writer is not None:
            peer.writer.cancel()
        if self._peers.pop(peer.socket, None) is None:
            return
        log.info(f"[LiveValueChannel] Peer disconnected. Total: {len(self._peers)}")
        if not self._peers:
            self._notify_connection(False)

    def _process_message(self, peer: ChannelPeer, raw) -> None:
        try:
            message_type, data = messages.decode(raw)
        except messages.MessageError as e:
            log.warn(f"[LiveValueChannel] Rejected frame: {e}")
            peer.outbox.put_nowait(messages.error(str(e)))
            return

        if message_type is messages.MessageType.PING:
            peer.outbox.put_nowait(messages.pong(data))
        elif message_type is messages.MessageType.PONG:
            log.debug(f"[LiveValueChannel] Pong received: {data}")
        elif message_type is messages.MessageType.ERROR:
            log.warn(f"[LiveValueChannel] Error from peer: {data.get('message')}")
        else:
            log.warn(f"[LiveValueChannel] Unexpected message type: {message_type.value}")
            peer.outbox.put_nowait(messages.error(f"Unknown message type: {message_type.value}"))

    def _notify_connection(self, connected: bool) -> None:
        for callback in list(self._connection_listeners):
            try:
                callback(connected)
            except Exception as e:
                log.error(e, "[LiveValueChannel] Connection listener failed")
