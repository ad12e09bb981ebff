"""Per-room async locking for membership changes."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class RoomLockManager(ABC):
    """Abstract base for per-room locking.

    Membership changes read a room, edit its member and admin lists and write
    it back; holding the room lock across those steps keeps concurrent admin
    operations from overwriting each other. Message sends do not take the lock
    because they only use the store's atomic field updates.
    """

    @abstractmethod
    @asynccontextmanager
    async def locked(self, room_id: str) -> AsyncIterator[None]:
        """Acquire an exclusive lock for *room_id*."""
        yield  # pragma: no cover


class InMemoryLockManager(RoomLockManager):
    """In-process per-room ``asyncio.Lock`` objects, released when unused.

    Suitable for single-process deployments.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def locked(self, room_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(room_id, asyncio.Lock())
        self._waiters[room_id] = self._waiters.get(room_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[room_id] -= 1
            if self._waiters[room_id] == 0:
                del self._waiters[room_id]
                del self._locks[room_id]

    @property
    def size(self) -> int:
        """Return the number of rooms with a live lock."""
        return len(self._locks)
