"""User model."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from alumnet.models.base import WireModel


class User(WireModel):
    """A user as seen by the messaging core."""

    id: str
    name: str | None = None
    avatar_url: str | None = None
    is_online: bool = False
    last_seen: datetime = Field(default_factory=lambda: datetime.now(UTC))
