"""Inbound socket protocol: one pydantic model per client event name."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, ValidationError

from alumnet.core.errors import BadRequest
from alumnet.models.base import WireModel


class JoinRoom(WireModel):
    event: Literal["joinRoom"] = "joinRoom"
    room_id: str


class LeaveRoom(WireModel):
    event: Literal["leaveRoom"] = "leaveRoom"
    room_id: str


class SendMessage(WireModel):
    """Text and/or a previously uploaded media URL."""

    event: Literal["sendMessage"] = "sendMessage"
    room_id: str
    text: str | None = None
    media_url: str | None = None
    mime_type: str | None = None


class MarkAsRead(WireModel):
    event: Literal["markAsRead"] = "markAsRead"
    room_id: str
    message_ids: list[str] = Field(default_factory=list)


class TypingStart(WireModel):
    event: Literal["typingStart"] = "typingStart"
    room_id: str


class TypingStop(WireModel):
    event: Literal["typingStop"] = "typingStop"
    room_id: str


class GetOnlineUsers(WireModel):
    event: Literal["getOnlineUsers"] = "getOnlineUsers"
    request_id: str | None = None


class JoinPost(WireModel):
    event: Literal["joinPost"] = "joinPost"
    post_id: str


class LeavePost(WireModel):
    event: Literal["leavePost"] = "leavePost"
    post_id: str


class PostLiked(WireModel):
    event: Literal["postLiked"] = "postLiked"
    post_id: str


class CommentLiked(WireModel):
    event: Literal["commentLiked"] = "commentLiked"
    comment_id: str
    post_id: str


ClientFrame = Annotated[
    JoinRoom
    | LeaveRoom
    | SendMessage
    | MarkAsRead
    | TypingStart
    | TypingStop
    | GetOnlineUsers
    | JoinPost
    | LeavePost
    | PostLiked
    | CommentLiked,
    Field(discriminator="event"),
]

_frame_adapter: TypeAdapter[ClientFrame] = TypeAdapter(ClientFrame)


def parse_client_event(raw: str | bytes | dict[str, Any]) -> ClientFrame:
    """Decode and validate one inbound frame.

    Raises:
        BadRequest: If the frame is not valid JSON.
        pydantic.ValidationError: If the frame is not an event object or its
            event name or fields are invalid.
    """
    if isinstance(raw, dict):
        return _frame_adapter.validate_python(raw)
    try:
        return _frame_adapter.validate_json(raw)
    except ValidationError as exc:
        if any(error["type"] == "json_invalid" for error in exc.errors()):
            raise BadRequest("Frame is not valid JSON") from exc
        raise
