"""
RendererLink - connection service between the editor and renderers.

Wraps a ChannelThread with the calls the editor needs: send a value if
anyone listens, report status, and notify listeners about renderers
attaching or leaving. Created once by the application and passed to
whoever needs it.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from shadernudge import log
from shadernudge.core.errors import ChannelStartFailure
from shadernudge.live.channel_thread import ChannelThread


class RendererLink:
    """
    Live value link to external renderers.

    Connection listeners run on the channel thread, except for the
    immediate call made on registration, which runs on the caller's
    thread.
    """

    def __init__(self, channel_thread: Optional[ChannelThread] = None):
        self._channel_thread = channel_thread or ChannelThread()
        self._connection_callbacks: List[Callable[[bool], None]] = []
        self._value_callbacks: List[Callable[[float], None]] = []
        # Set after the first skipped send; cleared when a renderer attaches
        self._skip_reported = False
        self._channel_thread.on_connection_change(self._notify_connection_change)

    @property
    def channel_thread(self) -> ChannelThread:
        return self._channel_thread

    def start(self) -> None:
        """
        Start the channel.

        Raises:
            ChannelStartFailure: the channel could not listen.
        """
        try:
            self._channel_thread.start()
        except ChannelStartFailure as e:
            log.error(f"[RendererLink] Failed to start: {e}")
            raise
        log.info("[RendererLink] Started")

    def stop(self) -> None:
        try:
            self._channel_thread.stop()
        except Exception as e:
            log.error(e, "[RendererLink] Failed to stop")
            return
        log.info("[RendererLink] Stopped")

    def send_uniform_value(self, value: float) -> None:
        """
        Broadcast ``value``; skipped when no renderer is attached.

        Only the first skipped send after a disconnect logs a warning.
        """
        if not self.is_connected():
            if self._skip_reported:
                log.debug(f"[RendererLink] No renderer connected, dropped {value}")
            else:
                log.warn("[RendererLink] Cannot send uniform value: no renderer connected")
                self._skip_reported = True
            return

        self._channel_thread.send_uniform_update(value)

        for callback in list(self._value_callbacks):
            try:
                callback(value)
            except Exception as e:
                log.error(e, "[RendererLink] Value callback failed")

        log.debug(f"[RendererLink] Uniform value sent: {value}")

    def is_connected(self) -> bool:
        status = self._channel_thread.get_connection_status()
        return status["is_running"] and status["client_count"] > 0

    def get_connection_status(self) -> dict:
        status = self._channel_thread.get_connection_status()
        return {
            "is_server_running": status["is_running"],
            "is_blender_connected": status["client_count"] > 0,
            "client_count": status["client_count"],
        }

    def on_connection_change(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """
        Register a connection listener and call it with the current state.

        Returns:
            Function removing the listener.
        """
        self._connection_callbacks.append(callback)
        callback(self.is_connected())

        def unsubscribe() -> None:
            if callback in self._connection_callbacks:
                self._connection_callbacks.remove(callback)

        return unsubscribe

    def on_value_change(self, callback: Callable[[float], None]) -> Callable[[], None]:
        """Register a listener called after every sent value."""
        self._value_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._value_callbacks:
                self._value_callbacks.remove(callback)

        return unsubscribe

    def get_debug_info(self) -> dict:
        return {
            "server_status": self._channel_thread.get_connection_status(),
            "callback_counts": {
                "connection": len(self._connection_callbacks),
                "value": len(self._value_callbacks),
            },
        }

    def _notify_connection_change(self, connected: bool) -> None:
        if connected:
            self._skip_reported = False
        for callback in list(self._connection_callbacks):
            try:
                callback(connected)
            except Exception as e:
                log.error(e, "[RendererLink] Connection callback failed")
