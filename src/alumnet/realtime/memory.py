"""In-memory event broadcaster."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from alumnet.realtime.base import Broadcaster, RealtimeEvent, SendFn

logger = logging.getLogger("alumnet.realtime")


@dataclass
class _Connection:
    user_id: str
    send: SendFn


class InMemoryBroadcaster(Broadcaster):
    """In-process broadcaster awaiting each subscriber's send callback directly.

    Suitable for single-process deployments. There is no queue and no replay:
    an event published while a user has no subscribed connection is dropped.
    A failing subscriber is logged and skipped so the remaining recipients
    still receive the event.
    """

    def __init__(self) -> None:
        self._connections: dict[str, _Connection] = {}
        self._channels: dict[str, set[str]] = {}  # channel -> connection_ids
        self._closed = False

    async def publish(
        self, channel: str, event: RealtimeEvent, *, exclude_user: str | None = None
    ) -> int:
        if self._closed:
            return 0

        delivered = 0
        # Snapshot: callbacks may subscribe or unsubscribe while we iterate.
        for connection_id in sorted(self._channels.get(channel, set())):
            conn = self._connections.get(connection_id)
            if conn is None:
                continue
            if exclude_user is not None and conn.user_id == exclude_user:
                continue
            try:
                await conn.send(event)
            except Exception:
                logger.exception(
                    "Failed to deliver %s to connection %s on %s",
                    event.name,
                    connection_id,
                    channel,
                )
                continue
            delivered += 1
        logger.debug("Published %s on %s to %d connection(s)", event.name, channel, delivered)
        return delivered

    async def register_connection(self, connection_id: str, user_id: str, send: SendFn) -> None:
        self._connections[connection_id] = _Connection(user_id, send)

    async def unregister_connection(self, connection_id: str) -> list[str]:
        self._connections.pop(connection_id, None)
        left: list[str] = []
        for channel in list(self._channels):
            if await self.unsubscribe(channel, connection_id):
                left.append(channel)
        return left

    async def subscribe(self, channel: str, connection_id: str) -> bool:
        if connection_id not in self._connections:
            logger.warning("Cannot subscribe unknown connection %s to %s", connection_id, channel)
            return False
        self._channels.setdefault(channel, set()).add(connection_id)
        return True

    async def unsubscribe(self, channel: str, connection_id: str) -> bool:
        subs = self._channels.get(channel)
        if not subs or connection_id not in subs:
            return False
        subs.discard(connection_id)
        if not subs:
            del self._channels[channel]
        return True

    async def unsubscribe_user(self, channel: str, user_id: str) -> int:
        removed = 0
        for connection_id in list(self._channels.get(channel, set())):
            conn = self._connections.get(connection_id)
            if conn is not None and conn.user_id == user_id:
                await self.unsubscribe(channel, connection_id)
                removed += 1
        return removed

    def subscribers(self, channel: str) -> set[str]:
        return set(self._channels.get(channel, set()))

    async def close(self) -> None:
        """Drop all connections and ignore further publishes."""
        self._closed = True
        self._connections.clear()
        self._channels.clear()

    @property
    def connection_count(self) -> int:
        """Return the number of registered connections."""
        return len(self._connections)
