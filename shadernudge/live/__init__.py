"""Live value channel between the editor and external renderers."""

from shadernudge.live.channel import ChannelPeer, ChannelState, LiveValueChannel
from shadernudge.live.channel_thread import ChannelThread
from shadernudge.live.renderer_client import RendererClient
from shadernudge.live.renderer_link import RendererLink

__all__ = [
    "ChannelPeer",
    "ChannelState",
    "ChannelThread",
    "LiveValueChannel",
    "RendererClient",
    "RendererLink",
]
