"""Tests for inbound frame parsing."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from alumnet.core.errors import BadRequest
from alumnet.models.enums import ClientEvent
from alumnet.transport.protocol import (
    CommentLiked,
    GetOnlineUsers,
    JoinRoom,
    MarkAsRead,
    SendMessage,
    parse_client_event,
)


class TestParseClientEvent:
    def test_join_room_from_json(self) -> None:
        frame = parse_client_event('{"event": "joinRoom", "roomId": "r1"}')
        assert isinstance(frame, JoinRoom)
        assert frame.room_id == "r1"

    def test_accepts_bytes(self) -> None:
        frame = parse_client_event(b'{"event": "getOnlineUsers", "requestId": "q1"}')
        assert isinstance(frame, GetOnlineUsers)
        assert frame.request_id == "q1"

    def test_snake_case_input(self) -> None:
        frame = parse_client_event(
            {"event": "sendMessage", "room_id": "r1", "media_url": "https://cdn/a.png"}
        )
        assert isinstance(frame, SendMessage)
        assert frame.media_url == "https://cdn/a.png"
        assert frame.text is None

    def test_mark_as_read_defaults_to_no_ids(self) -> None:
        frame = parse_client_event({"event": "markAsRead", "roomId": "r1"})
        assert isinstance(frame, MarkAsRead)
        assert frame.message_ids == []

    def test_comment_liked_needs_both_ids(self) -> None:
        frame = parse_client_event({"event": "commentLiked", "commentId": "c1", "postId": "p1"})
        assert isinstance(frame, CommentLiked)
        with pytest.raises(ValidationError):
            parse_client_event({"event": "commentLiked", "commentId": "c1"})

    def test_every_client_event_is_parseable(self) -> None:
        fields = {
            "roomId": "r1",
            "postId": "p1",
            "commentId": "c1",
        }
        for name in ClientEvent:
            frame = parse_client_event(json.dumps({"event": name.value, **fields}))
            assert frame.event == name.value

    def test_unknown_event(self) -> None:
        with pytest.raises(ValidationError):
            parse_client_event({"event": "dropTables"})

    def test_missing_event(self) -> None:
        with pytest.raises(ValidationError):
            parse_client_event({"roomId": "r1"})

    def test_missing_field(self) -> None:
        with pytest.raises(ValidationError):
            parse_client_event({"event": "joinRoom"})

    @pytest.mark.parametrize("raw", ["not json", '{"event": ', b""])
    def test_not_json(self, raw: str | bytes) -> None:
        with pytest.raises(BadRequest):
            parse_client_event(raw)

    @pytest.mark.parametrize("raw", ["[1, 2]", '"joinRoom"', "null"])
    def test_not_an_object(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            parse_client_event(raw)
