"""Tests for TypingTracker and its interaction with message sends."""

from __future__ import annotations

import pytest

from alumnet.config import ChatSettings
from alumnet.core.framework import ChatHub
from alumnet.models.enums import ServerEvent
from alumnet.models.room import Room
from alumnet.realtime.memory import InMemoryBroadcaster
from alumnet.store.memory import InMemoryStore
from tests.conftest import ConnectFn, Inbox


@pytest.fixture
async def room(hub: ChatHub) -> Room:
    return await hub.rooms.create("alice", ["bob"])


@pytest.fixture
async def bob_viewing(hub: ChatHub, room: Room, connect: ConnectFn) -> Inbox:
    """Bob connected and looking at the room."""
    inbox = await connect("bob", "b1")
    await hub.join_room("bob", room.id, "b1")
    inbox.clear()
    return inbox


class TestTypingTracker:
    async def test_start_and_stop(self, hub: ChatHub, room: Room, bob_viewing: Inbox) -> None:
        assert await hub.typing.start_typing("alice", room.id) is True
        assert await hub.typing.list_typing(room.id) == {"alice"}
        started = bob_viewing.last(ServerEvent.USER_TYPING)
        assert (started.user_id, started.is_typing) == ("alice", True)

        assert await hub.typing.stop_typing("alice", room.id) is True
        assert await hub.typing.list_typing(room.id) == set()
        stopped = bob_viewing.last(ServerEvent.USER_TYPING)
        assert (stopped.user_id, stopped.is_typing) == ("alice", False)

    async def test_typist_does_not_hear_themselves(
        self, hub: ChatHub, room: Room, connect: ConnectFn
    ) -> None:
        alice = await connect("alice", "a1")
        await hub.join_room("alice", room.id, "a1")
        await hub.typing.start_typing("alice", room.id)
        assert alice.of(ServerEvent.USER_TYPING) == []

    async def test_refresh_keeps_single_entry(self, hub: ChatHub, room: Room) -> None:
        await hub.typing.start_typing("alice", room.id)
        await hub.typing.start_typing("alice", room.id)
        assert await hub.typing.list_typing(room.id) == {"alice"}

    async def test_non_member_ignored(
        self, hub: ChatHub, room: Room, bob_viewing: Inbox
    ) -> None:
        assert await hub.typing.start_typing("mallory", room.id) is False
        assert await hub.typing.start_typing("alice", "ghost") is False
        assert await hub.typing.list_typing(room.id) == set()
        assert bob_viewing.events == []

    async def test_stop_without_start_still_broadcasts(
        self, hub: ChatHub, room: Room, bob_viewing: Inbox
    ) -> None:
        assert await hub.typing.stop_typing("alice", room.id) is False
        assert bob_viewing.last(ServerEvent.USER_TYPING).is_typing is False

    async def test_no_server_side_expiry(
        self, hub: ChatHub, room: Room, store: InMemoryStore
    ) -> None:
        await hub.typing.start_typing("alice", room.id)
        # entries persist until the client stops, sends, or disconnects
        await hub.messages.append("bob", room.id, text="unrelated")
        assert await hub.typing.list_typing(room.id) == {"alice"}
        assert len(await store.list_typing(room.id)) == 1

    async def test_cleanup_on_disconnect(self, hub: ChatHub, room: Room) -> None:
        other = await hub.rooms.create("alice", ["carol"])
        await hub.typing.start_typing("alice", room.id)
        await hub.typing.start_typing("alice", other.id)

        cleared = await hub.typing.cleanup_on_disconnect("alice")

        assert sorted(cleared) == sorted([room.id, other.id])
        assert await hub.typing.list_typing(room.id) == set()
        assert await hub.typing.list_typing(other.id) == set()

    async def test_stop_before_send(self, hub: ChatHub, room: Room) -> None:
        await hub.start_typing("alice", room.id)
        await hub.stop_typing("alice", room.id)
        assert await hub.typing.list_typing(room.id) == set()
        await hub.send_message("alice", room.id, text="hi")
        assert await hub.typing.list_typing(room.id) == set()


class TestSendClearsTyping:
    async def test_send_clears_entry_by_default(
        self, hub: ChatHub, room: Room, bob_viewing: Inbox
    ) -> None:
        assert hub.settings.clear_typing_on_send is True
        await hub.start_typing("alice", room.id)

        await hub.send_message("alice", room.id, text="hi")

        assert await hub.typing.list_typing(room.id) == set()
        typing_events = bob_viewing.of(ServerEvent.USER_TYPING)
        assert [e.is_typing for e in typing_events] == [True, False]

    async def test_send_without_typing_sends_no_stop(
        self, hub: ChatHub, room: Room, bob_viewing: Inbox
    ) -> None:
        await hub.send_message("alice", room.id, text="hi")
        assert bob_viewing.of(ServerEvent.USER_TYPING) == []

    async def test_send_keeps_entry_when_disabled(
        self, store: InMemoryStore, broadcaster: InMemoryBroadcaster
    ) -> None:
        hub = ChatHub(
            store=store,
            broadcaster=broadcaster,
            settings=ChatSettings(clear_typing_on_send=False),
        )
        room = await hub.rooms.create("alice", ["bob"])
        await hub.start_typing("alice", room.id)

        await hub.send_message("alice", room.id, text="hi")

        assert await hub.typing.list_typing(room.id) == {"alice"}
        await hub.stop_typing("alice", room.id)
        assert await hub.typing.list_typing(room.id) == set()
