"""Post and comment live updates sharing the chat event channel."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from alumnet.core.errors import NotFound
from alumnet.models.enums import ServerEvent
from alumnet.models.events import FeedPayload, LikeUpdatePayload
from alumnet.realtime.base import Broadcaster, RealtimeEvent, post_channel

logger = logging.getLogger("alumnet.feed")


class PostSource(ABC):
    """Read access to the like lists owned by the external post service."""

    @abstractmethod
    async def get_post_likes(self, post_id: str) -> list[str] | None:
        """User IDs that liked the post, or ``None`` if the post does not exist."""
        ...

    @abstractmethod
    async def get_comment_likes(self, comment_id: str) -> list[str] | None:
        """User IDs that liked the comment, or ``None`` if it does not exist."""
        ...


class InMemoryPostSource(PostSource):
    """Dict-backed ``PostSource`` for development and testing."""

    def __init__(
        self,
        post_likes: dict[str, list[str]] | None = None,
        comment_likes: dict[str, list[str]] | None = None,
    ) -> None:
        self.post_likes = post_likes or {}
        self.comment_likes = comment_likes or {}

    async def get_post_likes(self, post_id: str) -> list[str] | None:
        likes = self.post_likes.get(post_id)
        return list(likes) if likes is not None else None

    async def get_comment_likes(self, comment_id: str) -> list[str] | None:
        likes = self.comment_likes.get(comment_id)
        return list(likes) if likes is not None else None


class FeedNotifier:
    """Fans out like counts and comment changes to viewers of a post.

    ``post_liked`` and ``comment_liked`` are triggered by clients after the
    post service has recorded the like; the ``new_*`` / ``comment_*`` methods
    are called by the post service itself.
    """

    def __init__(self, broadcaster: Broadcaster, posts: PostSource | None = None) -> None:
        self._broadcaster = broadcaster
        self._posts = posts or InMemoryPostSource()

    async def join_post(self, connection_id: str, post_id: str) -> bool:
        """Start receiving updates for a post on this connection."""
        return await self._broadcaster.subscribe(post_channel(post_id), connection_id)

    async def leave_post(self, connection_id: str, post_id: str) -> bool:
        return await self._broadcaster.unsubscribe(post_channel(post_id), connection_id)

    async def post_liked(self, post_id: str) -> LikeUpdatePayload:
        """Broadcast the current like count of a post.

        Raises:
            NotFound: If the post does not exist.
        """
        likes = await self._posts.get_post_likes(post_id)
        if likes is None:
            raise NotFound(f"Post {post_id} not found")
        payload = LikeUpdatePayload(post_id=post_id, likes_count=len(likes), liked_user_ids=likes)
        await self._broadcaster.publish_to_post(
            post_id, RealtimeEvent(ServerEvent.POST_LIKE_UPDATE, payload)
        )
        return payload

    async def comment_liked(self, comment_id: str, post_id: str) -> LikeUpdatePayload:
        """Broadcast the current like count of a comment to the post's viewers.

        Raises:
            NotFound: If the comment does not exist.
        """
        likes = await self._posts.get_comment_likes(comment_id)
        if likes is None:
            raise NotFound(f"Comment {comment_id} not found")
        payload = LikeUpdatePayload(
            comment_id=comment_id, likes_count=len(likes), liked_user_ids=likes
        )
        await self._broadcaster.publish_to_post(
            post_id, RealtimeEvent(ServerEvent.COMMENT_LIKE_UPDATE, payload)
        )
        return payload

    async def new_post(self, post: dict[str, Any]) -> None:
        """Announce a freshly created post to every connected user."""
        post_id = str(post.get("id") or post.get("_id") or "") or None
        await self._broadcaster.publish_global(
            RealtimeEvent(ServerEvent.NEW_POST, FeedPayload(post_id=post_id, post=post))
        )

    async def new_comment(
        self, post_id: str, comment: dict[str, Any], parent_comment_id: str | None = None
    ) -> None:
        await self._broadcaster.publish_to_post(
            post_id,
            RealtimeEvent(
                ServerEvent.NEW_COMMENT,
                FeedPayload(post_id=post_id, comment=comment, parent_comment=parent_comment_id),
            ),
        )

    async def comment_edited(self, post_id: str, comment: dict[str, Any]) -> None:
        await self._broadcaster.publish_to_post(
            post_id,
            RealtimeEvent(
                ServerEvent.COMMENT_EDITED, FeedPayload(post_id=post_id, comment=comment)
            ),
        )

    async def comment_deleted(
        self, post_id: str, comment_id: str, parent_comment_id: str | None = None
    ) -> None:
        await self._broadcaster.publish_to_post(
            post_id,
            RealtimeEvent(
                ServerEvent.COMMENT_DELETED,
                FeedPayload(
                    post_id=post_id, comment_id=comment_id, parent_comment=parent_comment_id
                ),
            ),
        )
        logger.debug("Comment %s deleted on post %s", comment_id, post_id)
