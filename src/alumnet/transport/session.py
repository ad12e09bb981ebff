"""Per-connection socket session: decodes client frames and drives the hub."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from alumnet.core.errors import ChatError
from alumnet.core.framework import ChatHub
from alumnet.models.enums import ServerEvent
from alumnet.models.events import ErrorPayload, OnlineUsersPayload
from alumnet.realtime.base import RealtimeEvent
from alumnet.transport.protocol import (
    CommentLiked,
    GetOnlineUsers,
    JoinPost,
    JoinRoom,
    LeavePost,
    LeaveRoom,
    MarkAsRead,
    PostLiked,
    SendMessage,
    TypingStart,
    TypingStop,
    parse_client_event,
)

logger = logging.getLogger("alumnet.transport.session")

FrameSendFn = Callable[[dict[str, Any]], Awaitable[None]]


class ClientSession:
    """One authenticated socket connection.

    The transport owns the socket; the session owns the mapping between
    client frames and hub operations. Failures of a single frame are reported
    back as an ``error`` event and never close the connection.
    """

    def __init__(
        self,
        hub: ChatHub,
        user_id: str,
        send: FrameSendFn,
        connection_id: str | None = None,
    ) -> None:
        self._hub = hub
        self.user_id = user_id
        self.connection_id = connection_id or uuid4().hex
        self._send = send
        self._handlers: dict[type[Any], Callable[[Any], Awaitable[None]]] = {
            JoinRoom: self._on_join_room,
            LeaveRoom: self._on_leave_room,
            SendMessage: self._on_send_message,
            MarkAsRead: self._on_mark_as_read,
            TypingStart: self._on_typing_start,
            TypingStop: self._on_typing_stop,
            GetOnlineUsers: self._on_get_online_users,
            JoinPost: self._on_join_post,
            LeavePost: self._on_leave_post,
            PostLiked: self._on_post_liked,
            CommentLiked: self._on_comment_liked,
        }

    async def open(self) -> None:
        await self._hub.open_connection(self.user_id, self.connection_id, self.deliver)
        logger.debug("Session %s opened for %s", self.connection_id, self.user_id)

    async def close(self) -> None:
        await self._hub.close_connection(self.connection_id)
        logger.debug("Session %s closed for %s", self.connection_id, self.user_id)

    async def deliver(self, event: RealtimeEvent) -> None:
        """Broadcaster callback writing one event to the socket."""
        await self._send(event.to_dict())

    async def handle(self, raw: str | bytes | dict[str, Any]) -> None:
        """Process one inbound frame, replying with ``error`` on failure."""
        request_event = raw.get("event") if isinstance(raw, dict) else None
        try:
            frame = parse_client_event(raw)
            request_event = frame.event
            await self._handlers[type(frame)](frame)
        except ValidationError as exc:
            await self._send_error("bad_request", _describe(exc), request_event)
        except ChatError as exc:
            message = "Internal server error" if exc.status_code >= 500 else exc.message
            await self._send_error(exc.code, message, request_event)
        except Exception:
            logger.exception(
                "Unhandled error processing %s from %s", request_event, self.user_id
            )
            await self._send_error("internal", "Internal server error", request_event)

    async def _send_error(self, code: str, message: str, request_event: Any) -> None:
        event = RealtimeEvent(
            ServerEvent.ERROR,
            ErrorPayload(
                code=code,
                message=message,
                request_event=request_event if isinstance(request_event, str) else None,
            ),
        )
        await self.deliver(event)

    # -- Frame handlers --

    async def _on_join_room(self, frame: JoinRoom) -> None:
        await self._hub.join_room(self.user_id, frame.room_id, self.connection_id)

    async def _on_leave_room(self, frame: LeaveRoom) -> None:
        await self._hub.leave_room(self.user_id, frame.room_id, self.connection_id)

    async def _on_send_message(self, frame: SendMessage) -> None:
        await self._hub.send_message(
            self.user_id,
            frame.room_id,
            text=frame.text,
            media_url=frame.media_url,
            mime_type=frame.mime_type,
        )

    async def _on_mark_as_read(self, frame: MarkAsRead) -> None:
        await self._hub.mark_read(self.user_id, frame.room_id, frame.message_ids)

    async def _on_typing_start(self, frame: TypingStart) -> None:
        await self._hub.start_typing(self.user_id, frame.room_id)

    async def _on_typing_stop(self, frame: TypingStop) -> None:
        await self._hub.stop_typing(self.user_id, frame.room_id)

    async def _on_get_online_users(self, frame: GetOnlineUsers) -> None:
        payload = OnlineUsersPayload(
            user_ids=self._hub.online_users(), request_id=frame.request_id
        )
        await self.deliver(RealtimeEvent(ServerEvent.ONLINE_USERS, payload))

    async def _on_join_post(self, frame: JoinPost) -> None:
        await self._hub.join_post(self.connection_id, frame.post_id)

    async def _on_leave_post(self, frame: LeavePost) -> None:
        await self._hub.leave_post(self.connection_id, frame.post_id)

    async def _on_post_liked(self, frame: PostLiked) -> None:
        await self._hub.post_liked(frame.post_id)

    async def _on_comment_liked(self, frame: CommentLiked) -> None:
        await self._hub.comment_liked(frame.comment_id, frame.post_id)


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid')}" if location else str(first.get("msg"))
