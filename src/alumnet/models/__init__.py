"""Data models for the messaging core."""

from alumnet.models.enums import ClientEvent, MessageStatus, MessageType, ServerEvent
from alumnet.models.message import MediaRef, Message, Receipt
from alumnet.models.room import Room, RoomSummary, TypingEntry
from alumnet.models.user import User

__all__ = [
    "ClientEvent",
    "MediaRef",
    "Message",
    "MessageStatus",
    "MessageType",
    "Receipt",
    "Room",
    "RoomSummary",
    "ServerEvent",
    "TypingEntry",
    "User",
]
