"""ChatHub - facade wiring presence, rooms, messages, typing and the feed."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from alumnet.config import ChatSettings
from alumnet.core.errors import internal_on_failure
from alumnet.core.feed import FeedNotifier, PostSource
from alumnet.core.locks import RoomLockManager
from alumnet.core.membership import RoomRegistry
from alumnet.core.messages import MessageStore
from alumnet.core.presence import PresenceTracker
from alumnet.core.typing_indicators import TypingTracker
from alumnet.core.unread import UnreadCounter
from alumnet.models.events import LikeUpdatePayload
from alumnet.models.message import MediaRef, Message
from alumnet.models.room import Room, RoomSummary
from alumnet.realtime.base import Broadcaster, SendFn
from alumnet.realtime.memory import InMemoryBroadcaster
from alumnet.store.base import ChatStore
from alumnet.store.memory import InMemoryStore

logger = logging.getLogger("alumnet.framework")


class ChatHub:
    """Central entry point used by transports.

    One instance owns one store, one broadcaster and the components built on
    them. Transports call these methods with an already-authenticated user ID.
    """

    def __init__(
        self,
        store: ChatStore | None = None,
        broadcaster: Broadcaster | None = None,
        settings: ChatSettings | None = None,
        posts: PostSource | None = None,
        lock_manager: RoomLockManager | None = None,
    ) -> None:
        """Initialise the hub.

        Args:
            store: Persistence backend. Defaults to ``InMemoryStore``.
            broadcaster: Live fan-out backend. Defaults to ``InMemoryBroadcaster``.
            settings: Limits and behaviour switches. Defaults to ``ChatSettings()``.
            posts: Like lists for the feed. Defaults to an empty in-memory source.
            lock_manager: Per-room locks for membership changes.
        """
        self._store = store or InMemoryStore()
        self._broadcaster = broadcaster or InMemoryBroadcaster()
        self._settings = settings or ChatSettings()

        self.unread = UnreadCounter(self._store)
        self.typing = TypingTracker(self._store, self._broadcaster)
        self.presence = PresenceTracker(self._store, self._broadcaster, typing=self.typing)
        self.rooms = RoomRegistry(
            self._store, self._broadcaster, self.unread, lock_manager, typing=self.typing
        )
        self.messages = MessageStore(
            self._store,
            self._broadcaster,
            self.rooms,
            self.unread,
            typing=self.typing,
            settings=self._settings,
        )
        self.feed = FeedNotifier(self._broadcaster, posts)

    @property
    def store(self) -> ChatStore:
        return self._store

    @property
    def broadcaster(self) -> Broadcaster:
        return self._broadcaster

    @property
    def settings(self) -> ChatSettings:
        return self._settings

    # -- Connections --

    @internal_on_failure
    async def open_connection(self, user_id: str, connection_id: str, send: SendFn) -> bool:
        """Register an authenticated connection and mark its user online."""
        return await self.presence.connect(user_id, connection_id, send)

    @internal_on_failure
    async def close_connection(self, connection_id: str) -> str | None:
        """Tear down a connection; returns the user ID if they went offline."""
        return await self.presence.disconnect(connection_id)

    def online_users(self) -> list[str]:
        return sorted(self.presence.list_online())

    # -- Viewing rooms --

    @internal_on_failure
    async def join_room(
        self, user_id: str, room_id: str, connection_id: str | None = None
    ) -> list[str]:
        """Open a room: subscribe, reset unread, and mark pending messages delivered.

        Returns:
            IDs of messages newly delivered to the user.
        """
        await self.rooms.join(user_id, room_id, connection_id)
        return await self.messages.mark_delivered(user_id, room_id)

    @internal_on_failure
    async def leave_room(
        self, user_id: str, room_id: str, connection_id: str | None = None
    ) -> None:
        await self.rooms.leave(user_id, room_id, connection_id)

    # -- Messaging --

    @internal_on_failure
    async def send_message(
        self,
        user_id: str,
        room_id: str,
        text: str | None = None,
        media_url: str | None = None,
        mime_type: str | None = None,
    ) -> Message:
        media = MediaRef(url=media_url, mime_type=mime_type) if media_url else None
        return await self.messages.append(user_id, room_id, text=text, media=media)

    @internal_on_failure
    async def mark_read(self, user_id: str, room_id: str, message_ids: Iterable[str]) -> list[str]:
        return await self.messages.mark_read(user_id, room_id, message_ids)

    @internal_on_failure
    async def fetch_messages(
        self,
        user_id: str,
        room_id: str,
        page: int = 1,
        page_size: int | None = None,
        mark_read: bool = True,
    ) -> list[Message]:
        """Load a page of history for a member, marking what they see as read.

        Args:
            user_id: The requesting member.
            room_id: Room to page through.
            page: 1-based page number counting back from the newest message.
            page_size: Messages per page; defaults to ``settings.default_page_size``.
            mark_read: Record read receipts for other members' messages on the page.
        """
        messages = await self.messages.list_page(room_id, page, page_size, user_id=user_id)
        if not mark_read:
            return messages
        unread = [
            m.id
            for m in messages
            if m.sender_id != user_id and user_id not in m.read_user_ids()
        ]
        if not unread:
            return messages
        await self.messages.mark_read(user_id, room_id, unread)
        return await self.messages.list_page(room_id, page, page_size, user_id=user_id)

    # -- Typing --

    @internal_on_failure
    async def start_typing(self, user_id: str, room_id: str) -> bool:
        return await self.typing.start_typing(user_id, room_id)

    @internal_on_failure
    async def stop_typing(self, user_id: str, room_id: str) -> bool:
        return await self.typing.stop_typing(user_id, room_id)

    # -- Rooms --

    @internal_on_failure
    async def create_room(
        self,
        user_id: str,
        member_ids: Iterable[str],
        is_group: bool = False,
        name: str | None = None,
    ) -> RoomSummary:
        room = await self.rooms.create(user_id, member_ids, is_group=is_group, name=name)
        return await self.rooms.summary(room, user_id)

    @internal_on_failure
    async def list_rooms(self, user_id: str) -> list[RoomSummary]:
        return await self.rooms.list_for_user(user_id)

    @internal_on_failure
    async def add_members(self, user_id: str, room_id: str, member_ids: Iterable[str]) -> Room:
        return await self.rooms.add_members(user_id, room_id, member_ids)

    @internal_on_failure
    async def promote_admin(self, user_id: str, room_id: str, target_id: str) -> Room:
        return await self.rooms.promote_admin(user_id, room_id, target_id)

    @internal_on_failure
    async def remove_member(self, user_id: str, room_id: str, target_id: str) -> Room:
        room = await self.rooms.remove_member(user_id, room_id, target_id)
        await self.messages.refresh_statuses(room_id)
        return room

    @internal_on_failure
    async def leave_group(self, user_id: str, room_id: str) -> Room | None:
        """Leave a room; the room is deleted (``None``) when its last member leaves."""
        room = await self.rooms.leave_group(user_id, room_id)
        if room is not None:
            await self.messages.refresh_statuses(room_id)
        return room

    # -- Feed --

    @internal_on_failure
    async def join_post(self, connection_id: str, post_id: str) -> bool:
        return await self.feed.join_post(connection_id, post_id)

    @internal_on_failure
    async def leave_post(self, connection_id: str, post_id: str) -> bool:
        return await self.feed.leave_post(connection_id, post_id)

    @internal_on_failure
    async def post_liked(self, post_id: str) -> LikeUpdatePayload:
        return await self.feed.post_liked(post_id)

    @internal_on_failure
    async def comment_liked(self, comment_id: str, post_id: str) -> LikeUpdatePayload:
        return await self.feed.comment_liked(comment_id, post_id)

    @internal_on_failure
    async def new_post(self, post: dict[str, Any]) -> None:
        await self.feed.new_post(post)

    # -- Lifecycle --

    async def close(self) -> None:
        """Close the broadcaster and the store."""
        await self._broadcaster.close()
        await self._store.close()
        logger.debug("Hub closed")

    async def __aenter__(self) -> ChatHub:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
