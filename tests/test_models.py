"""Tests for the data models."""

from __future__ import annotations

from typing import get_args

import pytest
from pydantic import ValidationError

from alumnet.models.enums import MessageStatus, MessageType, ServerEvent
from alumnet.models.events import (
    PAYLOAD_TYPES,
    EventPayload,
    MessagesDeliveredPayload,
    UserTypingPayload,
)
from alumnet.models.message import MediaRef, Message, Receipt
from alumnet.models.room import Room, RoomSummary
from alumnet.realtime.base import RealtimeEvent


class TestMediaRef:
    @pytest.mark.parametrize(
        ("mime", "expected"),
        [
            ("image/png", MessageType.IMAGE),
            ("IMAGE/JPEG", MessageType.IMAGE),
            ("video/mp4", MessageType.VIDEO),
            ("application/pdf", MessageType.FILE),
        ],
    )
    def test_kind_from_mime(self, mime: str, expected: MessageType) -> None:
        assert MediaRef(url="https://cdn/x.bin", mime_type=mime).kind == expected

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://cdn/a.JPG", MessageType.IMAGE),
            ("https://cdn/a.webp?v=2", MessageType.IMAGE),
            ("https://cdn/clip.mov", MessageType.VIDEO),
            ("https://cdn/doc.pdf", MessageType.FILE),
            ("https://cdn/noext", MessageType.FILE),
        ],
    )
    def test_kind_from_extension(self, url: str, expected: MessageType) -> None:
        assert MediaRef(url=url).kind == expected

    def test_mime_wins_over_extension(self) -> None:
        assert MediaRef(url="https://cdn/a.png", mime_type="video/webm").kind == MessageType.VIDEO

    def test_blank_url_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MediaRef(url="  ")


class TestMessage:
    def test_defaults(self) -> None:
        msg = Message(room_id="r1", sender_id="alice", text="hi")
        assert msg.id
        assert msg.type == MessageType.TEXT
        assert msg.status == MessageStatus.SENT
        assert msg.delivered_to == []
        assert msg.read_by == []

    def test_sender_cannot_hold_receipt(self) -> None:
        with pytest.raises(ValidationError, match="own message"):
            Message(
                room_id="r1",
                sender_id="alice",
                text="hi",
                read_by=[Receipt(user_id="alice")],
            )

    def test_one_receipt_per_user(self) -> None:
        with pytest.raises(ValidationError, match="one receipt per user"):
            Message(
                room_id="r1",
                sender_id="alice",
                text="hi",
                delivered_to=[Receipt(user_id="bob"), Receipt(user_id="bob")],
            )

    def test_receipt_user_ids(self) -> None:
        msg = Message(
            room_id="r1",
            sender_id="alice",
            text="hi",
            delivered_to=[Receipt(user_id="bob"), Receipt(user_id="carol")],
            read_by=[Receipt(user_id="bob")],
        )
        assert msg.delivered_user_ids() == {"bob", "carol"}
        assert msg.read_user_ids() == {"bob"}

    def test_wire_format_is_camel_case(self) -> None:
        data = Message(room_id="r1", sender_id="alice", media_url="https://x/a.png").to_wire()
        assert data["roomId"] == "r1"
        assert data["senderId"] == "alice"
        assert data["mediaUrl"] == "https://x/a.png"
        assert "deliveredTo" in data
        assert "readBy" in data
        assert data["status"] == "sent"

    def test_accepts_camel_case_input(self) -> None:
        msg = Message.model_validate({"roomId": "r1", "senderId": "alice", "text": "hi"})
        assert msg.room_id == "r1"


class TestRoom:
    def test_members_unique(self) -> None:
        with pytest.raises(ValidationError, match="unique"):
            Room(name="x", member_ids=["a", "a"])

    def test_direct_room_has_no_admins(self) -> None:
        with pytest.raises(ValidationError, match="Only group rooms"):
            Room(name="x", member_ids=["a", "b"], admin_ids=["a"])

    def test_admins_must_be_members(self) -> None:
        with pytest.raises(ValidationError, match="Admins must be members"):
            Room(name="x", member_ids=["a"], is_group=True, admin_ids=["z"])

    def test_helpers(self) -> None:
        room = Room(name="x", member_ids=["a", "b", "c"], is_group=True, admin_ids=["a"])
        assert room.has_member("b")
        assert not room.has_member("z")
        assert room.is_admin("a")
        assert not room.is_admin("b")
        assert room.other_members("b") == ["a", "c"]

    def test_summary_carries_unread_count(self) -> None:
        summary = RoomSummary(name="x", member_ids=["a"], unread_count=3)
        assert summary.to_wire()["unreadCount"] == 3

    def test_negative_unread_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RoomSummary(name="x", member_ids=["a"], unread_count=-1)


class TestRealtimeEvent:
    def test_to_dict(self) -> None:
        event = RealtimeEvent(
            ServerEvent.USER_TYPING,
            UserTypingPayload(room_id="r1", user_id="bob", is_typing=True),
        )
        assert event.to_dict() == {
            "event": "userTyping",
            "data": {"roomId": "r1", "userId": "bob", "isTyping": True},
        }

    def test_auto_fields(self) -> None:
        event = RealtimeEvent(
            ServerEvent.MESSAGES_DELIVERED,
            MessagesDeliveredPayload(room_id="r1", message_ids=["m1"], delivered_to="bob"),
        )
        assert event.id
        assert event.timestamp.tzinfo is not None

    def test_every_server_event_has_a_payload_schema(self) -> None:
        assert set(PAYLOAD_TYPES) == set(ServerEvent)

    def test_payload_schemas_are_event_payloads(self) -> None:
        assert set(PAYLOAD_TYPES.values()) <= set(get_args(EventPayload))
