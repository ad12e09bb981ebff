"""Online presence tracking."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from alumnet.core.errors import Conflict
from alumnet.models.enums import ServerEvent
from alumnet.models.events import PresencePayload
from alumnet.realtime.base import GLOBAL_CHANNEL, Broadcaster, RealtimeEvent, SendFn, user_channel
from alumnet.store.base import ChatStore

if TYPE_CHECKING:
    from alumnet.core.typing_indicators import TypingTracker

logger = logging.getLogger("alumnet.presence")


class PresenceTracker:
    """Tracks live connections per user and announces online/offline transitions.

    A user may hold several connections (tabs, devices). ``userOnline`` is
    broadcast when the first one connects and ``userOffline`` when the last
    one goes away.
    """

    def __init__(
        self,
        store: ChatStore,
        broadcaster: Broadcaster,
        typing: TypingTracker | None = None,
    ) -> None:
        self._store = store
        self._broadcaster = broadcaster
        self._typing = typing
        self._connection_users: dict[str, str] = {}
        self._user_connections: dict[str, set[str]] = {}

    async def connect(self, user_id: str, connection_id: str, send: SendFn | None = None) -> bool:
        """Associate a live connection with an authenticated user.

        Args:
            user_id: The identity supplied by the auth collaborator.
            connection_id: Unique identifier of the transport connection.
            send: Delivery callback. When given, the connection is subscribed
                to the user's personal channel and the global channel.

        Returns:
            True if the user transitioned from offline to online.

        Raises:
            Conflict: If the connection is already bound to another user.
        """
        owner = self._connection_users.get(connection_id)
        if owner == user_id:
            return False
        if owner is not None:
            raise Conflict(f"Connection {connection_id} already belongs to another user")

        self._connection_users[connection_id] = user_id
        connections = self._user_connections.setdefault(user_id, set())
        came_online = not connections
        connections.add(connection_id)

        if send is not None:
            await self._broadcaster.register_connection(connection_id, user_id, send)
            await self._broadcaster.subscribe(user_channel(user_id), connection_id)
            await self._broadcaster.subscribe(GLOBAL_CHANNEL, connection_id)

        if came_online:
            await self._store.set_presence(user_id, True, datetime.now(UTC))
            logger.info("User %s is online", user_id)
            await self._broadcaster.publish_global(
                RealtimeEvent(ServerEvent.USER_ONLINE, PresencePayload(user_id=user_id)),
                exclude_user=user_id,
            )
        return came_online

    async def disconnect(self, connection_id: str) -> str | None:
        """Drop a connection. Unknown or already-closed connections are ignored.

        Returns:
            The user ID if this was the user's last connection, else ``None``.
        """
        user_id = self._connection_users.pop(connection_id, None)
        if user_id is None:
            return None

        connections = self._user_connections.get(user_id, set())
        connections.discard(connection_id)
        await self._broadcaster.unregister_connection(connection_id)

        if self._typing is not None:
            await self._typing.cleanup_on_disconnect(user_id)

        if connections:
            return None

        self._user_connections.pop(user_id, None)
        await self._store.set_presence(user_id, False, datetime.now(UTC))
        logger.info("User %s is offline", user_id)
        await self._broadcaster.publish_global(
            RealtimeEvent(ServerEvent.USER_OFFLINE, PresencePayload(user_id=user_id)),
            exclude_user=user_id,
        )
        return user_id

    def list_online(self) -> set[str]:
        """Snapshot of the users holding at least one connection."""
        return set(self._user_connections)

    def is_online(self, user_id: str) -> bool:
        return user_id in self._user_connections

    def user_for(self, connection_id: str) -> str | None:
        """The user owning *connection_id*, if it is connected."""
        return self._connection_users.get(connection_id)

    def connections_for(self, user_id: str) -> set[str]:
        return set(self._user_connections.get(user_id, set()))
