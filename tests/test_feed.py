"""Tests for FeedNotifier."""

from __future__ import annotations

import pytest

from alumnet.core.errors import NotFound
from alumnet.core.feed import InMemoryPostSource
from alumnet.core.framework import ChatHub
from alumnet.models.enums import ServerEvent
from tests.conftest import ConnectFn


class TestPostViewers:
    async def test_like_update_reaches_post_viewers_only(
        self, hub: ChatHub, connect: ConnectFn
    ) -> None:
        viewer = await connect("bob", "b1")
        bystander = await connect("carol", "c1")
        await hub.join_post("b1", "p1")

        payload = await hub.post_liked("p1")

        assert payload.likes_count == 2
        update = viewer.last(ServerEvent.POST_LIKE_UPDATE)
        assert update.post_id == "p1"
        assert update.liked_user_ids == ["alice", "bob"]
        assert bystander.of(ServerEvent.POST_LIKE_UPDATE) == []

    async def test_leave_post(self, hub: ChatHub, connect: ConnectFn) -> None:
        viewer = await connect("bob", "b1")
        await hub.join_post("b1", "p1")
        assert await hub.leave_post("b1", "p1") is True
        await hub.post_liked("p1")
        assert viewer.of(ServerEvent.POST_LIKE_UPDATE) == []

    async def test_comment_liked(self, hub: ChatHub, connect: ConnectFn) -> None:
        viewer = await connect("bob", "b1")
        await hub.join_post("b1", "p1")

        await hub.comment_liked("c1", "p1")

        update = viewer.last(ServerEvent.COMMENT_LIKE_UPDATE)
        assert update.comment_id == "c1"
        assert update.likes_count == 1
        assert update.to_wire()["commentId"] == "c1"

    async def test_unknown_post(self, hub: ChatHub) -> None:
        with pytest.raises(NotFound):
            await hub.post_liked("ghost")

    async def test_unknown_comment(self, hub: ChatHub) -> None:
        with pytest.raises(NotFound):
            await hub.comment_liked("ghost", "p1")

    async def test_unliked_post_reports_zero(
        self, hub: ChatHub, posts: InMemoryPostSource
    ) -> None:
        posts.post_likes["p2"] = []
        payload = await hub.post_liked("p2")
        assert payload.likes_count == 0
        assert payload.liked_user_ids == []


class TestFeedHooks:
    async def test_new_post_is_global(self, hub: ChatHub, connect: ConnectFn) -> None:
        bob = await connect("bob")
        carol = await connect("carol")

        await hub.new_post({"_id": "p9", "content": "Reunion!"})

        for inbox in (bob, carol):
            payload = inbox.last(ServerEvent.NEW_POST)
            assert payload.post_id == "p9"
            assert payload.post["content"] == "Reunion!"

    async def test_comment_events_scoped_to_post(self, hub: ChatHub, connect: ConnectFn) -> None:
        viewer = await connect("bob", "b1")
        other = await connect("carol", "c1")
        await hub.join_post("b1", "p1")
        await hub.join_post("c1", "p2")

        await hub.feed.new_comment("p1", {"_id": "k1", "text": "congrats"}, parent_comment_id="k0")
        await hub.feed.comment_edited("p1", {"_id": "k1", "text": "congrats!"})
        await hub.feed.comment_deleted("p1", "k1")

        assert viewer.names()[-3:] == [
            ServerEvent.NEW_COMMENT,
            ServerEvent.COMMENT_EDITED,
            ServerEvent.COMMENT_DELETED,
        ]
        assert viewer.last(ServerEvent.NEW_COMMENT).parent_comment == "k0"
        assert viewer.last(ServerEvent.COMMENT_DELETED).comment_id == "k1"
        assert other.of(ServerEvent.NEW_COMMENT) == []
