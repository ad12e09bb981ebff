"""Per-room, per-user unread counters."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from alumnet.store.base import ChatStore

logger = logging.getLogger("alumnet.unread")


class UnreadCounter:
    """Unread message counts backed by the store's atomic counter operations.

    Counters only ever grow by one per message or drop straight to zero;
    there is no decrement.
    """

    def __init__(self, store: ChatStore) -> None:
        self._store = store

    async def increment(self, room_id: str, user_id: str) -> int:
        """Count one more unread message for *user_id* and return the new value."""
        return await self._store.increment_unread(room_id, user_id, 1)

    async def increment_many(self, room_id: str, user_ids: Iterable[str]) -> None:
        """Increment the counter of every user in *user_ids* by one."""
        for user_id in user_ids:
            await self._store.increment_unread(room_id, user_id, 1)

    async def reset(self, room_id: str, user_id: str) -> None:
        await self._store.reset_unread(room_id, user_id)
        logger.debug("Reset unread count for %s in room %s", user_id, room_id)

    async def get(self, room_id: str, user_id: str) -> int:
        return max(0, await self._store.get_unread(room_id, user_id))
