"""Abstract base class for chat storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from alumnet.models.enums import MessageStatus
from alumnet.models.message import Message
from alumnet.models.room import Room, TypingEntry
from alumnet.models.user import User


class ChatStore(ABC):
    """Persistent storage for users, rooms, messages, counters and typing entries.

    Implement this ABC to plug in any storage backend (MongoDB, SQL, etc.).
    The library ships with ``InMemoryStore`` for development and testing.

    Counter and receipt operations must be atomic per document: use the
    backend's increment / add-to-set primitives (``$inc``, ``$addToSet``,
    ``UPDATE ... SET n = n + 1``) rather than reading and writing back, so
    that concurrent senders never lose updates.
    """

    # User operations

    @abstractmethod
    async def upsert_user(self, user: User) -> User:
        """Create or replace a user record."""
        ...

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        """Get a user by ID, or ``None`` if unknown."""
        ...

    @abstractmethod
    async def set_presence(self, user_id: str, is_online: bool, last_seen: datetime) -> None:
        """Persist the online flag and last activity time, creating the user if needed."""
        ...

    # Room operations

    @abstractmethod
    async def create_room(self, room: Room) -> Room:
        """Persist a new room."""
        ...

    @abstractmethod
    async def get_room(self, room_id: str) -> Room | None:
        """Get a room by ID, or ``None`` if it doesn't exist."""
        ...

    @abstractmethod
    async def update_room(self, room: Room) -> Room:
        """Replace an existing room. Raises ``NotFound`` if it was deleted."""
        ...

    @abstractmethod
    async def delete_room(self, room_id: str) -> bool:
        """Delete a room with its messages, counters and typing entries.

        Returns ``True`` if the room existed.
        """
        ...

    @abstractmethod
    async def find_direct_room(self, member_ids: set[str]) -> Room | None:
        """Find a non-group room whose member set is exactly *member_ids*."""
        ...

    @abstractmethod
    async def list_rooms_for_user(self, user_id: str) -> list[Room]:
        """List rooms the user belongs to, most recently updated first."""
        ...

    @abstractmethod
    async def touch_room(self, room_id: str, last_message_id: str, at: datetime) -> None:
        """Set the room's last message pointer and ``updated_at`` in one update."""
        ...

    # Message operations

    @abstractmethod
    async def add_message_auto_index(self, message: Message) -> Message:
        """Assign the next per-room index and store the message atomically."""
        ...

    @abstractmethod
    async def get_message(self, message_id: str) -> Message | None:
        """Get a message by ID."""
        ...

    @abstractmethod
    async def list_messages(
        self, room_id: str, offset: int = 0, limit: int = 50, newest_first: bool = True
    ) -> list[Message]:
        """List messages in a room by creation index with pagination."""
        ...

    @abstractmethod
    async def list_undelivered(self, room_id: str, user_id: str) -> list[Message]:
        """Messages in the room authored by others and not yet delivered to *user_id*."""
        ...

    @abstractmethod
    async def add_delivery(self, message_id: str, user_id: str, at: datetime) -> bool:
        """Append a delivery record unless one exists. Returns ``True`` if appended."""
        ...

    @abstractmethod
    async def add_read(self, message_id: str, user_id: str, at: datetime) -> bool:
        """Append a read record unless one exists. Returns ``True`` if appended."""
        ...

    @abstractmethod
    async def set_message_status(self, message_id: str, status: MessageStatus) -> None:
        """Store the recomputed aggregate status of a message."""
        ...

    @abstractmethod
    async def get_message_count(self, room_id: str) -> int:
        """Return the total number of messages in a room."""
        ...

    # Unread counters

    @abstractmethod
    async def increment_unread(self, room_id: str, user_id: str, amount: int = 1) -> int:
        """Atomically add *amount* to the counter and return the new value."""
        ...

    @abstractmethod
    async def reset_unread(self, room_id: str, user_id: str) -> None:
        """Set the counter to zero."""
        ...

    @abstractmethod
    async def get_unread(self, room_id: str, user_id: str) -> int:
        """Return the counter, ``0`` if never set."""
        ...

    @abstractmethod
    async def delete_unread(self, room_id: str, user_id: str) -> None:
        """Drop the counter entry, e.g. when the user leaves the room."""
        ...

    # Typing entries

    @abstractmethod
    async def set_typing(self, entry: TypingEntry) -> TypingEntry:
        """Insert or refresh the entry for ``(room_id, user_id)``."""
        ...

    @abstractmethod
    async def remove_typing(self, room_id: str, user_id: str) -> bool:
        """Remove the entry. Returns ``True`` if it existed."""
        ...

    @abstractmethod
    async def list_typing(self, room_id: str) -> list[TypingEntry]:
        """List typing entries for a room."""
        ...

    @abstractmethod
    async def list_typing_rooms(self, user_id: str) -> list[str]:
        """IDs of rooms where the user currently has a typing entry."""
        ...

    async def close(self) -> None:
        """Clean up resources.

        Override this method in subclasses that need cleanup.
        The default implementation does nothing.
        """
        return None
