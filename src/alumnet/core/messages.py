"""Message store: sending, paging, and delivery/read receipts."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from alumnet.config import ChatSettings
from alumnet.core.delivery import (
    RecipientState,
    aggregate_status,
    recipient_state,
    required_receipts,
)
from alumnet.core.errors import BadRequest
from alumnet.core.membership import RoomRegistry
from alumnet.core.typing_indicators import TypingTracker
from alumnet.core.unread import UnreadCounter
from alumnet.models.enums import MessageStatus, MessageType, ServerEvent
from alumnet.models.events import MessageReadPayload, MessagesDeliveredPayload
from alumnet.models.message import MediaRef, Message
from alumnet.models.room import Room
from alumnet.realtime.base import Broadcaster, RealtimeEvent
from alumnet.store.base import ChatStore

logger = logging.getLogger("alumnet.messages")


class MessageStore:
    """Append-only per-room message log with per-recipient receipts.

    Every write is committed to the store before any notification is sent;
    notification failures are logged and never undo the write.
    """

    def __init__(
        self,
        store: ChatStore,
        broadcaster: Broadcaster,
        registry: RoomRegistry,
        unread: UnreadCounter,
        typing: TypingTracker | None = None,
        settings: ChatSettings | None = None,
    ) -> None:
        self._store = store
        self._broadcaster = broadcaster
        self._registry = registry
        self._unread = unread
        self._typing = typing
        self._settings = settings or ChatSettings()

    async def append(
        self,
        sender_id: str,
        room_id: str,
        text: str | None = None,
        media: MediaRef | None = None,
    ) -> Message:
        """Persist a new message and notify every member.

        Args:
            sender_id: Author of the message; must be a room member.
            room_id: Target room.
            text: Optional message body.
            media: Optional uploaded file reference.

        Returns:
            The stored message with its room index assigned.

        Raises:
            NotFound: If the room does not exist.
            Forbidden: If the sender is not a member.
            BadRequest: If there is neither text nor media, or the text is too long.
        """
        room = await self._registry.require_member(sender_id, room_id)
        if text is not None and not text.strip():
            text = None
        if text is None and media is None:
            raise BadRequest("Message text or media is required")
        if text is not None and len(text) > self._settings.max_text_length:
            raise BadRequest(
                f"Message text exceeds {self._settings.max_text_length} characters"
            )

        message = Message(
            room_id=room_id,
            sender_id=sender_id,
            text=text,
            media_url=media.url if media is not None else None,
            type=media.kind if media is not None else MessageType.TEXT,
        )
        message = await self._store.add_message_auto_index(message)
        await self._store.touch_room(room_id, message.id, message.created_at)
        await self._unread.increment_many(room_id, room.other_members(sender_id))
        logger.info("Message %s sent by %s in room %s", message.id, sender_id, room_id)

        try:
            if self._typing is not None and self._settings.clear_typing_on_send:
                await self._typing.clear(sender_id, room_id)
            room = await self._registry.get(room_id)
            for member_id in room.member_ids:
                await self._broadcaster.publish_to_user(
                    member_id, RealtimeEvent(ServerEvent.NEW_MESSAGE, message)
                )
            await self._registry.announce(room)
        except Exception:
            logger.exception("Fan-out failed for message %s", message.id)
        return message

    async def list_page(
        self,
        room_id: str,
        page: int = 1,
        page_size: int | None = None,
        user_id: str | None = None,
    ) -> list[Message]:
        """Return one page of history, oldest message first.

        Pages count back from the newest message, so page 1 holds the most
        recent ``page_size`` messages. Messages sent while paging may shift
        page boundaries.

        Raises:
            BadRequest: If ``page`` < 1 or ``page_size`` is out of range.
            NotFound: If the room does not exist.
            Forbidden: If ``user_id`` is given and is not a member.
        """
        size = page_size if page_size is not None else self._settings.default_page_size
        if page < 1:
            raise BadRequest("page must be >= 1")
        if not 1 <= size <= self._settings.max_page_size:
            raise BadRequest(f"page size must be between 1 and {self._settings.max_page_size}")
        if user_id is not None:
            room = await self._registry.require_member(user_id, room_id)
        else:
            room = await self._registry.get(room_id)

        newest_first = await self._store.list_messages(
            room_id, offset=(page - 1) * size, limit=size, newest_first=True
        )
        return [await self._current(message, room) for message in reversed(newest_first)]

    async def mark_delivered(self, user_id: str, room_id: str) -> list[str]:
        """Record delivery to *user_id* of every message they have not received.

        Returns:
            IDs of the messages that gained a delivery record.
        """
        room = await self._registry.require_member(user_id, room_id)
        now = datetime.now(UTC)
        delivered: list[Message] = []
        for message in await self._store.list_undelivered(room_id, user_id):
            if await self._store.add_delivery(message.id, user_id, now):
                await self._refresh_status(message.id, room)
                delivered.append(message)

        if not delivered:
            return []
        ids = [m.id for m in delivered]
        logger.debug("Marked %d message(s) delivered to %s in room %s", len(ids), user_id, room_id)

        try:
            event = RealtimeEvent(
                ServerEvent.MESSAGES_DELIVERED,
                MessagesDeliveredPayload(room_id=room_id, message_ids=ids, delivered_to=user_id),
            )
            for target in dict.fromkeys([user_id, *(m.sender_id for m in delivered)]):
                await self._broadcaster.publish_to_user(target, event)
        except Exception:
            logger.exception("Fan-out failed for delivery receipts in room %s", room_id)
        return ids

    async def mark_read(self, user_id: str, room_id: str, message_ids: Iterable[str]) -> list[str]:
        """Record that *user_id* read the given messages and clear their unread count.

        IDs from another room, authored by the reader, or unknown are skipped.

        Returns:
            IDs of the messages that gained a read record.
        """
        room = await self._registry.require_member(user_id, room_id)
        now = datetime.now(UTC)
        newly_read: list[tuple[Message, MessageStatus]] = []
        for message_id in dict.fromkeys(message_ids):
            message = await self._store.get_message(message_id)
            if message is None or message.room_id != room_id or message.sender_id == user_id:
                continue
            state = recipient_state(message, user_id)
            read_added = False
            for receipt in required_receipts(state, RecipientState.READ):
                if receipt is RecipientState.DELIVERED:
                    await self._store.add_delivery(message_id, user_id, now)
                else:
                    read_added = await self._store.add_read(message_id, user_id, now)
            if read_added:
                newly_read.append((message, await self._refresh_status(message_id, room)))

        await self._unread.reset(room_id, user_id)

        try:
            for message, status in newly_read:
                await self._broadcaster.publish_to_user(
                    message.sender_id,
                    RealtimeEvent(
                        ServerEvent.MESSAGE_READ,
                        MessageReadPayload(
                            message_id=message.id,
                            room_id=room_id,
                            read_by=user_id,
                            read_at=now,
                            status=status,
                        ),
                    ),
                )
            await self._registry.announce(await self._registry.get(room_id))
        except Exception:
            logger.exception("Fan-out failed for read receipts in room %s", room_id)
        return [m.id for m, _ in newly_read]

    async def refresh_statuses(self, room_id: str) -> int:
        """Recompute every message's status after the room's membership shrank.

        Returns:
            The number of messages whose status changed.
        """
        room = await self._registry.get(room_id)
        count = await self._store.get_message_count(room_id)
        changed = 0
        for message in await self._store.list_messages(
            room_id, offset=0, limit=count, newest_first=False
        ):
            if (await self._current(message, room)).status != message.status:
                changed += 1
        if changed:
            logger.debug("Updated status of %d message(s) in room %s", changed, room_id)
        return changed

    async def _current(self, message: Message, room: Room) -> Message:
        """Bring a stored status in line with the room's present membership.

        Members who left since the last receipt no longer count towards ``read``.
        """
        status = aggregate_status(message, room.member_ids)
        if status == message.status:
            return message
        await self._store.set_message_status(message.id, status)
        return message.model_copy(update={"status": status})

    async def _refresh_status(self, message_id: str, room: Room) -> MessageStatus:
        """Recompute the aggregate status against the room's current members."""
        message = await self._store.get_message(message_id)
        if message is None:
            return MessageStatus.SENT
        status = aggregate_status(message, room.member_ids)
        if status != message.status:
            await self._store.set_message_status(message_id, status)
        return status
