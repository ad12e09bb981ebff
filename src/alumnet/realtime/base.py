"""Abstract base class and types for event broadcasters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from alumnet.models.enums import ServerEvent
from alumnet.models.events import EventPayload

GLOBAL_CHANNEL = "global"


def user_channel(user_id: str) -> str:
    """Personal channel reaching every connection of a user."""
    return f"user:{user_id}"


def room_channel(room_id: str) -> str:
    """Channel of connections currently viewing a chat room."""
    return f"room:{room_id}"


def post_channel(post_id: str) -> str:
    """Channel of connections currently viewing a post."""
    return f"post:{post_id}"


@dataclass
class RealtimeEvent:
    """A live notification. Delivered at most once, never persisted."""

    name: ServerEvent
    payload: EventPayload
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON frame sent to clients."""
        return {"event": self.name.value, "data": self.payload.to_wire()}


SendFn = Callable[[RealtimeEvent], Coroutine[Any, Any, None]]


class Broadcaster(ABC):
    """Abstract base for fan-out of live events to connections.

    Implement this to plug in any pub/sub backend (Redis, NATS, etc.).
    The library ships with ``InMemoryBroadcaster`` for single-process
    deployments.
    """

    @abstractmethod
    async def publish(
        self, channel: str, event: RealtimeEvent, *, exclude_user: str | None = None
    ) -> int:
        """Deliver an event to every subscriber of a channel.

        Args:
            channel: Target channel name.
            event: The event to deliver.
            exclude_user: Skip connections belonging to this user.

        Returns:
            The number of connections the event was handed to successfully.
        """
        ...

    @abstractmethod
    async def register_connection(self, connection_id: str, user_id: str, send: SendFn) -> None:
        """Register a live connection and its delivery callback.

        Re-registering replaces the callback and keeps existing subscriptions.
        """
        ...

    @abstractmethod
    async def unregister_connection(self, connection_id: str) -> list[str]:
        """Forget a connection and detach it from every channel.

        Returns:
            The channels the connection was subscribed to.
        """
        ...

    @abstractmethod
    async def subscribe(self, channel: str, connection_id: str) -> bool:
        """Attach a registered connection to a channel.

        Returns:
            False if the connection is not registered.
        """
        ...

    @abstractmethod
    async def unsubscribe(self, channel: str, connection_id: str) -> bool:
        """Detach a connection from a channel.

        Returns:
            True if the connection was subscribed.
        """
        ...

    @abstractmethod
    async def unsubscribe_user(self, channel: str, user_id: str) -> int:
        """Detach every connection of *user_id* from a channel. Returns how many."""
        ...

    @abstractmethod
    def subscribers(self, channel: str) -> set[str]:
        """Connection IDs subscribed to a channel."""
        ...

    async def publish_to_user(self, user_id: str, event: RealtimeEvent) -> int:
        """Convenience method to publish an event to a personal channel."""
        return await self.publish(user_channel(user_id), event)

    async def publish_to_room(
        self, room_id: str, event: RealtimeEvent, *, exclude_user: str | None = None
    ) -> int:
        """Convenience method to publish an event to a room channel."""
        return await self.publish(room_channel(room_id), event, exclude_user=exclude_user)

    async def publish_to_post(self, post_id: str, event: RealtimeEvent) -> int:
        """Convenience method to publish an event to a post channel."""
        return await self.publish(post_channel(post_id), event)

    async def publish_global(
        self, event: RealtimeEvent, *, exclude_user: str | None = None
    ) -> int:
        """Convenience method to publish an event to every connection."""
        return await self.publish(GLOBAL_CHANNEL, event, exclude_user=exclude_user)

    async def close(self) -> None:
        """Clean up resources.

        Override this method in subclasses that need cleanup.
        The default implementation does nothing.
        """
        return None
