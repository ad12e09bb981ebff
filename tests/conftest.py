"""Shared test fixtures and helpers."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any

import pytest

from alumnet.config import ChatSettings
from alumnet.core.feed import InMemoryPostSource
from alumnet.core.framework import ChatHub
from alumnet.models.enums import ServerEvent
from alumnet.realtime.base import RealtimeEvent
from alumnet.realtime.memory import InMemoryBroadcaster
from alumnet.store.memory import InMemoryStore


class Inbox:
    """Send callback recording every event delivered to one connection."""

    def __init__(self) -> None:
        self.events: list[RealtimeEvent] = []

    async def __call__(self, event: RealtimeEvent) -> None:
        self.events.append(event)

    def names(self) -> list[ServerEvent]:
        return [e.name for e in self.events]

    def of(self, name: ServerEvent) -> list[Any]:
        return [e.payload for e in self.events if e.name == name]

    def last(self, name: ServerEvent) -> Any:
        payloads = self.of(name)
        assert payloads, f"no {name} event received"
        return payloads[-1]

    def clear(self) -> None:
        self.events.clear()


ConnectFn = Callable[..., Coroutine[Any, Any, Inbox]]


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def broadcaster() -> InMemoryBroadcaster:
    return InMemoryBroadcaster()


@pytest.fixture
def settings() -> ChatSettings:
    return ChatSettings()


@pytest.fixture
def posts() -> InMemoryPostSource:
    return InMemoryPostSource(
        post_likes={"p1": ["alice", "bob"]},
        comment_likes={"c1": ["carol"]},
    )


@pytest.fixture
def hub(
    store: InMemoryStore,
    broadcaster: InMemoryBroadcaster,
    settings: ChatSettings,
    posts: InMemoryPostSource,
) -> ChatHub:
    return ChatHub(store=store, broadcaster=broadcaster, settings=settings, posts=posts)


@pytest.fixture
def connect(hub: ChatHub) -> ConnectFn:
    """Open a recorded connection for a user::

    inbox = await connect("alice")
    inbox = await connect("alice", "alice-tab-2")
    """

    async def _connect(user_id: str, connection_id: str | None = None) -> Inbox:
        inbox = Inbox()
        await hub.open_connection(user_id, connection_id or f"{user_id}-conn", inbox)
        return inbox

    return _connect
