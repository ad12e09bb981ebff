"""In-memory implementation of ChatStore."""

from __future__ import annotations

from datetime import datetime

from alumnet.core.errors import NotFound
from alumnet.models.enums import MessageStatus
from alumnet.models.message import Message, Receipt
from alumnet.models.room import Room, TypingEntry
from alumnet.models.user import User
from alumnet.store.base import ChatStore


class InMemoryStore(ChatStore):
    """Dict-based in-memory store for development and testing.

    Every method completes without awaiting, so each call is atomic with
    respect to other tasks on the same event loop.
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._rooms: dict[str, Room] = {}
        self._messages: dict[str, Message] = {}
        self._room_messages: dict[str, list[str]] = {}
        self._unread: dict[str, dict[str, int]] = {}
        self._typing: dict[str, dict[str, TypingEntry]] = {}

    # User operations

    async def upsert_user(self, user: User) -> User:
        self._users[user.id] = user
        return user

    async def get_user(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return user.model_copy() if user is not None else None

    async def set_presence(self, user_id: str, is_online: bool, last_seen: datetime) -> None:
        user = self._users.get(user_id) or User(id=user_id)
        self._users[user_id] = user.model_copy(
            update={"is_online": is_online, "last_seen": last_seen}
        )

    # Room operations

    async def create_room(self, room: Room) -> Room:
        self._rooms[room.id] = room
        self._room_messages.setdefault(room.id, [])
        self._unread.setdefault(room.id, {})
        self._typing.setdefault(room.id, {})
        return room.model_copy(deep=True)

    async def get_room(self, room_id: str) -> Room | None:
        room = self._rooms.get(room_id)
        return room.model_copy(deep=True) if room is not None else None

    async def update_room(self, room: Room) -> Room:
        if room.id not in self._rooms:
            raise NotFound(f"Room {room.id} not found")
        self._rooms[room.id] = room
        return room.model_copy(deep=True)

    async def delete_room(self, room_id: str) -> bool:
        if room_id not in self._rooms:
            return False
        del self._rooms[room_id]
        for mid in self._room_messages.pop(room_id, []):
            self._messages.pop(mid, None)
        self._unread.pop(room_id, None)
        self._typing.pop(room_id, None)
        return True

    async def find_direct_room(self, member_ids: set[str]) -> Room | None:
        for room in self._rooms.values():
            if not room.is_group and set(room.member_ids) == member_ids:
                return room.model_copy(deep=True)
        return None

    async def list_rooms_for_user(self, user_id: str) -> list[Room]:
        rooms = [r for r in self._rooms.values() if user_id in r.member_ids]
        rooms.sort(key=lambda r: r.updated_at, reverse=True)
        return [r.model_copy(deep=True) for r in rooms]

    async def touch_room(self, room_id: str, last_message_id: str, at: datetime) -> None:
        room = self._rooms.get(room_id)
        if room is None:
            return
        self._rooms[room_id] = room.model_copy(
            update={"last_message_id": last_message_id, "updated_at": at}
        )

    # Message operations

    async def add_message_auto_index(self, message: Message) -> Message:
        """Atomically assign index = len(room_messages) and append."""
        ids = self._room_messages.setdefault(message.room_id, [])
        indexed = message.model_copy(update={"index": len(ids)})
        self._messages[indexed.id] = indexed
        ids.append(indexed.id)
        return indexed.model_copy(deep=True)

    async def get_message(self, message_id: str) -> Message | None:
        message = self._messages.get(message_id)
        return message.model_copy(deep=True) if message is not None else None

    async def list_messages(
        self, room_id: str, offset: int = 0, limit: int = 50, newest_first: bool = True
    ) -> list[Message]:
        ids = self._room_messages.get(room_id, [])
        ordered = list(reversed(ids)) if newest_first else list(ids)
        return [
            self._messages[mid].model_copy(deep=True)
            for mid in ordered[offset : offset + limit]
            if mid in self._messages
        ]

    async def list_undelivered(self, room_id: str, user_id: str) -> list[Message]:
        results: list[Message] = []
        for mid in self._room_messages.get(room_id, []):
            message = self._messages.get(mid)
            if message is None or message.sender_id == user_id:
                continue
            if user_id not in message.delivered_user_ids():
                results.append(message.model_copy(deep=True))
        return results

    async def add_delivery(self, message_id: str, user_id: str, at: datetime) -> bool:
        message = self._messages.get(message_id)
        if message is None or message.sender_id == user_id:
            return False
        if user_id in message.delivered_user_ids():
            return False
        receipts = [*message.delivered_to, Receipt(user_id=user_id, at=at)]
        self._messages[message_id] = message.model_copy(update={"delivered_to": receipts})
        return True

    async def add_read(self, message_id: str, user_id: str, at: datetime) -> bool:
        message = self._messages.get(message_id)
        if message is None or message.sender_id == user_id:
            return False
        if user_id in message.read_user_ids():
            return False
        receipts = [*message.read_by, Receipt(user_id=user_id, at=at)]
        self._messages[message_id] = message.model_copy(update={"read_by": receipts})
        return True

    async def set_message_status(self, message_id: str, status: MessageStatus) -> None:
        message = self._messages.get(message_id)
        if message is not None:
            self._messages[message_id] = message.model_copy(update={"status": status})

    async def get_message_count(self, room_id: str) -> int:
        return len(self._room_messages.get(room_id, []))

    # Unread counters

    async def increment_unread(self, room_id: str, user_id: str, amount: int = 1) -> int:
        if amount < 0:
            raise ValueError("Unread counters are only incremented")
        counters = self._unread.setdefault(room_id, {})
        counters[user_id] = counters.get(user_id, 0) + amount
        return counters[user_id]

    async def reset_unread(self, room_id: str, user_id: str) -> None:
        self._unread.setdefault(room_id, {})[user_id] = 0

    async def get_unread(self, room_id: str, user_id: str) -> int:
        return self._unread.get(room_id, {}).get(user_id, 0)

    async def delete_unread(self, room_id: str, user_id: str) -> None:
        self._unread.get(room_id, {}).pop(user_id, None)

    # Typing entries

    async def set_typing(self, entry: TypingEntry) -> TypingEntry:
        self._typing.setdefault(entry.room_id, {})[entry.user_id] = entry
        return entry

    async def remove_typing(self, room_id: str, user_id: str) -> bool:
        entries = self._typing.get(room_id, {})
        return entries.pop(user_id, None) is not None

    async def list_typing(self, room_id: str) -> list[TypingEntry]:
        return list(self._typing.get(room_id, {}).values())

    async def list_typing_rooms(self, user_id: str) -> list[str]:
        return [room_id for room_id, entries in self._typing.items() if user_id in entries]
