"""Outbound event payload schemas, one per server event name."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from alumnet.models.base import WireModel
from alumnet.models.enums import MessageStatus, ServerEvent
from alumnet.models.message import Message
from alumnet.models.room import RoomSummary


class UserTypingPayload(WireModel):
    room_id: str
    user_id: str
    is_typing: bool


class PresencePayload(WireModel):
    user_id: str


class OnlineUsersPayload(WireModel):
    user_ids: list[str]
    request_id: str | None = None


class MessageReadPayload(WireModel):
    message_id: str
    room_id: str
    read_by: str
    read_at: datetime
    status: MessageStatus


class MessagesDeliveredPayload(WireModel):
    room_id: str
    message_ids: list[str]
    delivered_to: str


class LikeUpdatePayload(WireModel):
    """Like count update for a post (``comment_id`` unset) or a comment."""

    post_id: str | None = None
    comment_id: str | None = None
    likes_count: int = Field(ge=0)
    liked_user_ids: list[str] = Field(default_factory=list)


class FeedPayload(WireModel):
    """Post/comment documents owned by the external feed service, passed through."""

    post_id: str | None = None
    post: dict[str, Any] | None = None
    comment: dict[str, Any] | None = None
    comment_id: str | None = None
    parent_comment: str | None = None


class ErrorPayload(WireModel):
    code: str
    message: str
    request_event: str | None = None


EventPayload = (
    Message
    | RoomSummary
    | UserTypingPayload
    | PresencePayload
    | OnlineUsersPayload
    | MessageReadPayload
    | MessagesDeliveredPayload
    | LikeUpdatePayload
    | FeedPayload
    | ErrorPayload
)

PAYLOAD_TYPES: dict[ServerEvent, type[WireModel]] = {
    ServerEvent.NEW_MESSAGE: Message,
    ServerEvent.ROOM_UPDATED: RoomSummary,
    ServerEvent.MESSAGE_READ: MessageReadPayload,
    ServerEvent.MESSAGES_DELIVERED: MessagesDeliveredPayload,
    ServerEvent.USER_TYPING: UserTypingPayload,
    ServerEvent.USER_ONLINE: PresencePayload,
    ServerEvent.USER_OFFLINE: PresencePayload,
    ServerEvent.ONLINE_USERS: OnlineUsersPayload,
    ServerEvent.POST_LIKE_UPDATE: LikeUpdatePayload,
    ServerEvent.COMMENT_LIKE_UPDATE: LikeUpdatePayload,
    ServerEvent.NEW_POST: FeedPayload,
    ServerEvent.NEW_COMMENT: FeedPayload,
    ServerEvent.COMMENT_EDITED: FeedPayload,
    ServerEvent.COMMENT_DELETED: FeedPayload,
    ServerEvent.ERROR: ErrorPayload,
}
