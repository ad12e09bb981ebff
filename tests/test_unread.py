"""Tests for UnreadCounter."""

from __future__ import annotations

import asyncio

from alumnet.core.unread import UnreadCounter
from alumnet.store.memory import InMemoryStore


class TestUnreadCounter:
    async def test_starts_at_zero(self, store: InMemoryStore) -> None:
        assert await UnreadCounter(store).get("r1", "bob") == 0

    async def test_increment_and_reset(self, store: InMemoryStore) -> None:
        unread = UnreadCounter(store)
        assert await unread.increment("r1", "bob") == 1
        assert await unread.increment("r1", "bob") == 2
        await unread.reset("r1", "bob")
        assert await unread.get("r1", "bob") == 0

    async def test_increment_many(self, store: InMemoryStore) -> None:
        unread = UnreadCounter(store)
        await unread.increment_many("r1", ["bob", "carol"])
        await unread.increment_many("r1", ["bob"])
        assert await unread.get("r1", "bob") == 2
        assert await unread.get("r1", "carol") == 1

    async def test_counters_are_per_room(self, store: InMemoryStore) -> None:
        unread = UnreadCounter(store)
        await unread.increment("r1", "bob")
        assert await unread.get("r2", "bob") == 0

    async def test_concurrent_increments(self, store: InMemoryStore) -> None:
        unread = UnreadCounter(store)
        await asyncio.gather(*(unread.increment("r1", "bob") for _ in range(25)))
        assert await unread.get("r1", "bob") == 25
