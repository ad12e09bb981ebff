"""FastAPI surface: chat REST routes and the realtime WebSocket endpoint.

Requires the ``fastapi`` optional dependency::

    pip install alumnet[http]

Usage::

    from alumnet import ChatHub, ChatSettings
    from alumnet.identity import JWTAuthenticator
    from alumnet.transport.http import create_app

    settings = ChatSettings.from_env()
    hub = ChatHub(settings=settings)
    app = create_app(hub, JWTAuthenticator(secret), settings)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Header, Query, Request, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field

from alumnet.config import ChatSettings
from alumnet.core.errors import ChatError, Unauthorized
from alumnet.core.framework import ChatHub
from alumnet.identity.base import Authenticator
from alumnet.models.base import WireModel
from alumnet.transport.session import ClientSession

logger = logging.getLogger("alumnet.transport.http")

WS_UNAUTHORIZED = 4401


class CreateRoomBody(WireModel):
    member_ids: list[str] = Field(default_factory=list)
    is_group: bool = False
    name: str | None = None


class SendMessageBody(WireModel):
    text: str | None = None
    media_url: str | None = None
    mime_type: str | None = None


class MarkReadBody(WireModel):
    message_ids: list[str] = Field(default_factory=list)


class AddMembersBody(WireModel):
    member_ids: list[str] = Field(default_factory=list)


class PromoteAdminBody(WireModel):
    user_id: str


async def current_user(
    request: Request, authorization: Annotated[str | None, Header()] = None
) -> str:
    """Resolve the ``Authorization: Bearer`` header to a user ID."""
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("No token, authorization denied")
    authenticator: Authenticator = request.app.state.authenticator
    user_id = await authenticator.authenticate(authorization.removeprefix("Bearer ").strip())
    if user_id is None:
        raise Unauthorized("Token is not valid")
    return user_id


CurrentUser = Annotated[str, Depends(current_user)]


def create_app(
    hub: ChatHub,
    authenticator: Authenticator,
    settings: ChatSettings | None = None,
) -> FastAPI:
    """Build the HTTP application around an existing hub.

    Args:
        hub: The messaging core to expose.
        authenticator: Resolves bearer tokens (REST) and ``?token=`` (WebSocket).
        settings: CORS origins and limits. Defaults to ``hub.settings``.
    """
    settings = settings or hub.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await hub.close()

    app = FastAPI(title="alumnet", lifespan=lifespan)
    app.state.hub = hub
    app.state.authenticator = authenticator
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatError)
    async def _chat_error(request: Request, exc: ChatError) -> JSONResponse:
        if exc.status_code >= 500:
            return JSONResponse({"message": "Server error"}, status_code=exc.status_code)
        return JSONResponse({"message": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse({"message": detail}, status_code=400)

    # -- REST --

    @app.get("/api/chat/rooms")
    async def list_rooms(user_id: CurrentUser) -> dict[str, Any]:
        rooms = await hub.list_rooms(user_id)
        return {"rooms": [room.to_wire() for room in rooms]}

    @app.post("/api/chat/rooms", status_code=201)
    async def create_room(body: CreateRoomBody, user_id: CurrentUser) -> dict[str, Any]:
        room = await hub.create_room(
            user_id, body.member_ids, is_group=body.is_group, name=body.name
        )
        return {"room": room.to_wire()}

    @app.get("/api/chat/rooms/{room_id}/messages")
    async def fetch_messages(
        room_id: str,
        user_id: CurrentUser,
        page: Annotated[int, Query()] = 1,
        limit: Annotated[int | None, Query()] = None,
    ) -> dict[str, Any]:
        messages = await hub.fetch_messages(user_id, room_id, page=page, page_size=limit)
        return {"messages": [m.to_wire() for m in messages]}

    @app.post("/api/chat/rooms/{room_id}/messages", status_code=201)
    async def send_message(
        room_id: str, body: SendMessageBody, user_id: CurrentUser
    ) -> dict[str, Any]:
        message = await hub.send_message(
            user_id, room_id, text=body.text, media_url=body.media_url, mime_type=body.mime_type
        )
        return {"message": message.to_wire()}

    @app.post("/api/chat/rooms/{room_id}/read")
    async def mark_read(
        room_id: str, body: MarkReadBody, user_id: CurrentUser
    ) -> dict[str, Any]:
        ids = await hub.mark_read(user_id, room_id, body.message_ids)
        return {"messageIds": ids}

    @app.post("/api/chat/rooms/{room_id}/members")
    async def add_members(
        room_id: str, body: AddMembersBody, user_id: CurrentUser
    ) -> dict[str, Any]:
        room = await hub.add_members(user_id, room_id, body.member_ids)
        return {"room": room.to_wire()}

    @app.post("/api/chat/rooms/{room_id}/admins")
    async def promote_admin(
        room_id: str, body: PromoteAdminBody, user_id: CurrentUser
    ) -> dict[str, Any]:
        room = await hub.promote_admin(user_id, room_id, body.user_id)
        return {"room": room.to_wire()}

    @app.delete("/api/chat/rooms/{room_id}/members/{member_id}")
    async def remove_member(
        room_id: str, member_id: str, user_id: CurrentUser
    ) -> dict[str, Any]:
        room = await hub.remove_member(user_id, room_id, member_id)
        return {"room": room.to_wire()}

    @app.delete("/api/chat/rooms/{room_id}/leave")
    async def leave_group(room_id: str, user_id: CurrentUser) -> dict[str, Any]:
        await hub.leave_group(user_id, room_id)
        return {"message": "Left room successfully"}

    @app.get("/api/chat/online")
    async def online_users(user_id: CurrentUser) -> dict[str, Any]:
        return {"userIds": hub.online_users()}

    # -- WebSocket --

    @app.websocket("/ws")
    async def realtime(websocket: WebSocket, token: str | None = None) -> None:
        user_id = await _authenticate_socket(authenticator, token)
        if user_id is None:
            await websocket.close(code=WS_UNAUTHORIZED)
            return

        await websocket.accept()
        session = ClientSession(hub, user_id, websocket.send_json)
        await session.open()
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.debug("WebSocket %s disconnected", session.connection_id)
                    break
                await session.handle(message.get("text") or message.get("bytes") or b"")
        finally:
            await session.close()

    return app


async def _authenticate_socket(authenticator: Authenticator, token: str | None) -> str | None:
    if not token:
        return None
    try:
        return await authenticator.authenticate(token)
    except Exception:
        logger.exception("Authenticator failed; rejecting connection")
        return None
