"""Typing indicator tracking."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from alumnet.models.enums import ServerEvent
from alumnet.models.events import UserTypingPayload
from alumnet.models.room import TypingEntry
from alumnet.realtime.base import Broadcaster, RealtimeEvent
from alumnet.store.base import ChatStore

logger = logging.getLogger("alumnet.typing")


class TypingTracker:
    """Ephemeral per-room set of users currently composing a message.

    The server never expires entries on its own. Clients are expected to send
    ``typingStop`` after an idle period; disconnect cleanup and (optionally)
    message sends are the only other ways an entry goes away.
    """

    def __init__(self, store: ChatStore, broadcaster: Broadcaster) -> None:
        self._store = store
        self._broadcaster = broadcaster

    async def start_typing(self, user_id: str, room_id: str) -> bool:
        """Insert or refresh the user's entry and tell the other viewers.

        Non-members and unknown rooms are ignored silently.

        Returns:
            True if the indicator was recorded.
        """
        room = await self._store.get_room(room_id)
        if room is None or not room.has_member(user_id):
            logger.debug("Ignoring typing from non-member %s in room %s", user_id, room_id)
            return False
        await self._store.set_typing(
            TypingEntry(room_id=room_id, user_id=user_id, started_at=datetime.now(UTC))
        )
        await self._announce(room_id, user_id, True)
        return True

    async def stop_typing(self, user_id: str, room_id: str) -> bool:
        """Remove the user's entry if present and broadcast the stop.

        Returns:
            True if an entry was removed.
        """
        removed = await self._store.remove_typing(room_id, user_id)
        await self._announce(room_id, user_id, False)
        return removed

    async def clear(self, user_id: str, room_id: str) -> bool:
        """Drop the user's entry after a send or a membership change.

        Only broadcasts when an entry actually existed.
        """
        removed = await self._store.remove_typing(room_id, user_id)
        if removed:
            await self._announce(room_id, user_id, False)
        return removed

    async def cleanup_on_disconnect(self, user_id: str) -> list[str]:
        """Remove the user's entries in every room they belong to.

        Returns:
            IDs of the rooms where an entry was removed.
        """
        cleared: list[str] = []
        for room_id in await self._store.list_typing_rooms(user_id):
            room = await self._store.get_room(room_id)
            if room is None or not room.has_member(user_id):
                continue
            if await self._store.remove_typing(room_id, user_id):
                cleared.append(room_id)
                await self._announce(room_id, user_id, False)
        if cleared:
            logger.debug("Cleared typing for %s in %d room(s)", user_id, len(cleared))
        return cleared

    async def list_typing(self, room_id: str) -> set[str]:
        return {entry.user_id for entry in await self._store.list_typing(room_id)}

    async def _announce(self, room_id: str, user_id: str, is_typing: bool) -> None:
        event = RealtimeEvent(
            ServerEvent.USER_TYPING,
            UserTypingPayload(room_id=room_id, user_id=user_id, is_typing=is_typing),
        )
        await self._broadcaster.publish_to_room(room_id, event, exclude_user=user_id)
