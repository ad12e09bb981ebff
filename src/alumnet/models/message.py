"""Message, receipt, and media reference models."""

from __future__ import annotations

from datetime import UTC, datetime
from urllib.parse import urlparse
from uuid import uuid4

from pydantic import Field, field_validator, model_validator

from alumnet.models.base import WireModel
from alumnet.models.enums import MessageStatus, MessageType

_IMAGE_EXTENSIONS = frozenset({"jpeg", "jpg", "gif", "png", "webp"})
_VIDEO_EXTENSIONS = frozenset({"mp4", "mov", "webm", "avi", "mkv"})


class MediaRef(WireModel):
    """Reference to an uploaded file, resolved by the media collaborator."""

    url: str
    mime_type: str | None = None

    @field_validator("url")
    @classmethod
    def _validate_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Media URL must not be empty")
        return v

    @property
    def kind(self) -> MessageType:
        """Infer the message type from the MIME type, falling back to the extension."""
        if self.mime_type:
            major = self.mime_type.split("/", 1)[0].lower()
            if major == "image":
                return MessageType.IMAGE
            if major == "video":
                return MessageType.VIDEO
            return MessageType.FILE
        path = urlparse(self.url).path
        ext = path.rsplit(".", 1)[-1].lower() if "." in path else ""
        if ext in _IMAGE_EXTENSIONS:
            return MessageType.IMAGE
        if ext in _VIDEO_EXTENSIONS:
            return MessageType.VIDEO
        return MessageType.FILE


class Receipt(WireModel):
    """A per-recipient delivery or read record."""

    user_id: str
    at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Message(WireModel):
    """A chat message in a room."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    room_id: str
    sender_id: str
    text: str | None = None
    media_url: str | None = None
    type: MessageType = MessageType.TEXT
    delivered_to: list[Receipt] = Field(default_factory=list)
    read_by: list[Receipt] = Field(default_factory=list)
    status: MessageStatus = MessageStatus.SENT
    index: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _validate_receipts(self) -> Message:
        for receipts in (self.delivered_to, self.read_by):
            users = [r.user_id for r in receipts]
            if self.sender_id in users:
                raise ValueError("Sender cannot hold a receipt for their own message")
            if len(set(users)) != len(users):
                raise ValueError("At most one receipt per user")
        return self

    def delivered_user_ids(self) -> set[str]:
        return {r.user_id for r in self.delivered_to}

    def read_user_ids(self) -> set[str]:
        return {r.user_id for r in self.read_by}
