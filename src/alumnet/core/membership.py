"""Room membership registry: direct and group rooms, admins, and room channels."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from alumnet.core.errors import BadRequest, Conflict, Forbidden, NotFound
from alumnet.core.locks import InMemoryLockManager, RoomLockManager
from alumnet.core.typing_indicators import TypingTracker
from alumnet.core.unread import UnreadCounter
from alumnet.models.enums import ServerEvent
from alumnet.models.room import Room, RoomSummary
from alumnet.realtime.base import Broadcaster, RealtimeEvent, room_channel
from alumnet.store.base import ChatStore

logger = logging.getLogger("alumnet.membership")

DEFAULT_GROUP_NAME = "Group Chat"
DEFAULT_DIRECT_NAME = "Direct Chat"


def _unique(ids: Iterable[str]) -> list[str]:
    """De-duplicate while keeping first-seen order."""
    return list(dict.fromkeys(ids))


class RoomRegistry:
    """Maps users to the rooms they belong to and guards every room operation.

    Group administration (add, promote, remove) is restricted to admins.
    ``join``/``leave`` only attach or detach a live connection from the
    room's broadcast channel; ``leave_group`` is the membership change and
    the only way a room is destroyed.
    """

    def __init__(
        self,
        store: ChatStore,
        broadcaster: Broadcaster,
        unread: UnreadCounter,
        lock_manager: RoomLockManager | None = None,
        typing: TypingTracker | None = None,
    ) -> None:
        self._store = store
        self._broadcaster = broadcaster
        self._unread = unread
        self._locks = lock_manager or InMemoryLockManager()
        self._typing = typing

    # -- Lookups --

    async def get(self, room_id: str) -> Room:
        """Get a room by ID. Raises NotFound if missing."""
        room = await self._store.get_room(room_id)
        if room is None:
            raise NotFound(f"Room {room_id} not found")
        return room

    async def require_member(self, user_id: str, room_id: str) -> Room:
        """Return the room if *user_id* belongs to it.

        Raises:
            NotFound: If the room does not exist.
            Forbidden: If the user is not a member.
        """
        room = await self.get(room_id)
        if not room.has_member(user_id):
            raise Forbidden(f"User {user_id} is not a member of room {room_id}")
        return room

    async def _require_group(self, room_id: str) -> Room:
        room = await self.get(room_id)
        if not room.is_group:
            raise NotFound(f"Group {room_id} not found")
        return room

    async def summary(self, room: Room, user_id: str) -> RoomSummary:
        """The room as seen by one member, with their unread count."""
        return RoomSummary(
            **room.model_dump(), unread_count=await self._unread.get(room.id, user_id)
        )

    async def list_for_user(self, user_id: str) -> list[RoomSummary]:
        """Rooms the user belongs to, most recently updated first."""
        rooms = await self._store.list_rooms_for_user(user_id)
        return [await self.summary(room, user_id) for room in rooms]

    async def announce(self, room: Room, user_ids: Iterable[str] | None = None) -> None:
        """Send each member a personalised ``roomUpdated`` on their personal channel."""
        for user_id in _unique(user_ids if user_ids is not None else room.member_ids):
            summary = await self.summary(room, user_id)
            await self._broadcaster.publish_to_user(
                user_id, RealtimeEvent(ServerEvent.ROOM_UPDATED, summary)
            )

    # -- Creation and viewing --

    async def create(
        self,
        initiator_id: str,
        member_ids: Iterable[str],
        is_group: bool = False,
        name: str | None = None,
    ) -> Room:
        """Create a direct or group room, reusing an existing direct room.

        Args:
            initiator_id: The user creating the room; always becomes a member.
            member_ids: The other intended members.
            is_group: Group rooms get the initiator as their first admin.
            name: Display name; defaults to "Group Chat" / "Direct Chat".

        Raises:
            BadRequest: If no members were given.
        """
        requested = list(member_ids)
        if not requested:
            raise BadRequest("At least one member is required")
        members = _unique([initiator_id, *requested])

        if not is_group and len(members) == 2:
            existing = await self._store.find_direct_room(set(members))
            if existing is not None:
                logger.debug("Reusing direct room %s for %s", existing.id, members)
                return existing

        room = Room(
            name=name or (DEFAULT_GROUP_NAME if is_group else DEFAULT_DIRECT_NAME),
            member_ids=members,
            is_group=is_group,
            admin_ids=[initiator_id] if is_group else [],
        )
        room = await self._store.create_room(room)
        logger.info(
            "Created %s room %s with %d member(s)",
            "group" if is_group else "direct",
            room.id,
            len(members),
        )
        await self.announce(room)
        return room

    async def join(self, user_id: str, room_id: str, connection_id: str | None = None) -> Room:
        """Start viewing a room: subscribe the connection and reset the unread count.

        Raises:
            NotFound: If the room does not exist.
            Forbidden: If the user is not a member.
        """
        room = await self.require_member(user_id, room_id)
        if connection_id is not None:
            await self._broadcaster.subscribe(room_channel(room_id), connection_id)
        await self._unread.reset(room_id, user_id)
        logger.debug("User %s joined room %s", user_id, room_id)
        return room

    async def leave(self, user_id: str, room_id: str, connection_id: str | None = None) -> None:
        """Stop viewing a room. Membership is unchanged."""
        if connection_id is not None:
            await self._broadcaster.unsubscribe(room_channel(room_id), connection_id)
        else:
            await self._broadcaster.unsubscribe_user(room_channel(room_id), user_id)
        logger.debug("User %s left room %s", user_id, room_id)

    # -- Group administration --

    async def add_members(self, actor_id: str, room_id: str, member_ids: Iterable[str]) -> Room:
        """Add users to a group. Already-present ids are skipped.

        Raises:
            NotFound: If the room does not exist or is not a group.
            Forbidden: If the actor is not an admin.
        """
        async with self._locks.locked(room_id):
            room = await self._require_group(room_id)
            if not room.is_admin(actor_id):
                raise Forbidden("Only admins can add members")
            added = [m for m in _unique(member_ids) if not room.has_member(m)]
            if not added:
                return room
            room = await self._store.update_room(
                room.model_copy(
                    update={
                        "member_ids": [*room.member_ids, *added],
                        "updated_at": datetime.now(UTC),
                    }
                )
            )
        logger.info("Admin %s added %s to room %s", actor_id, added, room_id)
        await self.announce(room)
        return room

    async def promote_admin(self, actor_id: str, room_id: str, target_id: str) -> Room:
        """Make a member an admin of a group.

        Raises:
            NotFound: If the room is not a group or the target is not a member.
            Forbidden: If the actor is not an admin.
            Conflict: If the target already is an admin.
        """
        async with self._locks.locked(room_id):
            room = await self._require_group(room_id)
            if not room.is_admin(actor_id):
                raise Forbidden("Forbidden: not an admin")
            if not room.has_member(target_id):
                raise NotFound(f"User {target_id} is not a member")
            if room.is_admin(target_id):
                raise Conflict(f"User {target_id} is already an admin")
            room = await self._store.update_room(
                room.model_copy(
                    update={
                        "admin_ids": [*room.admin_ids, target_id],
                        "updated_at": datetime.now(UTC),
                    }
                )
            )
        logger.info("Admin %s promoted %s in room %s", actor_id, target_id, room_id)
        await self.announce(room)
        return room

    async def remove_member(self, actor_id: str, room_id: str, target_id: str) -> Room:
        """Remove a member (and their admin role) from a group.

        Raises:
            BadRequest: If the actor targets themselves; admins use ``leave_group``.
            NotFound: If the room is not a group or the target is not a member.
            Forbidden: If the actor is not an admin.
        """
        if actor_id == target_id:
            raise BadRequest("Admins cannot remove themselves, leave the group instead")
        async with self._locks.locked(room_id):
            room = await self._require_group(room_id)
            if not room.is_admin(actor_id):
                raise Forbidden("Forbidden: not an admin")
            if not room.has_member(target_id):
                raise NotFound(f"User {target_id} is not a member")
            room = await self._store.update_room(
                room.model_copy(
                    update={
                        "member_ids": [m for m in room.member_ids if m != target_id],
                        "admin_ids": [a for a in room.admin_ids if a != target_id],
                        "updated_at": datetime.now(UTC),
                    }
                )
            )
            await self._detach(room_id, target_id)
        logger.info("Admin %s removed %s from room %s", actor_id, target_id, room_id)
        await self.announce(room, [*room.member_ids, target_id])
        return room

    async def leave_group(self, user_id: str, room_id: str) -> Room | None:
        """Give up membership; destroy the room when nobody is left.

        A group that loses its last admin promotes its first remaining member.

        Returns:
            The updated room, or ``None`` if it was deleted.

        Raises:
            NotFound: If the room does not exist or the user is not a member.
        """
        async with self._locks.locked(room_id):
            room = await self._store.get_room(room_id)
            if room is None or not room.has_member(user_id):
                raise NotFound(f"Room {room_id} not found")
            members = [m for m in room.member_ids if m != user_id]
            admins = [a for a in room.admin_ids if a != user_id]
            await self._detach(room_id, user_id)

            if not members:
                await self._store.delete_room(room_id)
                logger.info("Room %s deleted after its last member %s left", room_id, user_id)
                return None

            if room.is_group and not admins:
                admins = [members[0]]
            room = await self._store.update_room(
                room.model_copy(
                    update={
                        "member_ids": members,
                        "admin_ids": admins,
                        "updated_at": datetime.now(UTC),
                    }
                )
            )
        logger.info("User %s left room %s", user_id, room_id)
        await self.announce(room)
        return room

    async def _detach(self, room_id: str, user_id: str) -> None:
        """Drop per-member state of a user who is no longer in the room."""
        await self._broadcaster.unsubscribe_user(room_channel(room_id), user_id)
        await self._store.delete_unread(room_id, user_id)
        if self._typing is not None:
            await self._typing.clear(user_id, room_id)
        else:
            await self._store.remove_typing(room_id, user_id)
