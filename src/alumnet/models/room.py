"""Room model."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import Field, model_validator

from alumnet.models.base import WireModel


class Room(WireModel):
    """A direct or group conversation."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    member_ids: list[str] = Field(default_factory=list)
    is_group: bool = False
    admin_ids: list[str] = Field(default_factory=list)
    last_message_id: str | None = None
    avatar_url: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _validate_membership(self) -> Room:
        if len(set(self.member_ids)) != len(self.member_ids):
            raise ValueError("Room members must be unique")
        if not self.is_group and self.admin_ids:
            raise ValueError("Only group rooms have admins")
        stray = set(self.admin_ids) - set(self.member_ids)
        if stray:
            raise ValueError(f"Admins must be members: {sorted(stray)}")
        return self

    def has_member(self, user_id: str) -> bool:
        return user_id in self.member_ids

    def is_admin(self, user_id: str) -> bool:
        return user_id in self.admin_ids

    def other_members(self, user_id: str) -> list[str]:
        """Members of the room except *user_id*, in membership order."""
        return [m for m in self.member_ids if m != user_id]


class RoomSummary(Room):
    """A room as listed for one member, carrying that member's unread count."""

    unread_count: int = Field(default=0, ge=0)


class TypingEntry(WireModel):
    """Marks a user as currently composing a message in a room."""

    room_id: str
    user_id: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
