"""Live event fan-out to connected clients."""

from alumnet.realtime.base import (
    GLOBAL_CHANNEL,
    Broadcaster,
    RealtimeEvent,
    SendFn,
    post_channel,
    room_channel,
    user_channel,
)
from alumnet.realtime.memory import InMemoryBroadcaster

__all__ = [
    "GLOBAL_CHANNEL",
    "Broadcaster",
    "InMemoryBroadcaster",
    "RealtimeEvent",
    "SendFn",
    "post_channel",
    "room_channel",
    "user_channel",
]
