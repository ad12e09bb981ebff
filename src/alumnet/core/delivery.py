"""Per-recipient delivery/read state machine and aggregate message status.

Each (message, recipient) pair moves ``absent -> delivered -> read`` and never
backwards. The aggregate status shown to the room is derived from the receipts
and the room's *current* membership; it is recomputed whenever a receipt is
appended and holds no timers of its own.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum

from alumnet.models.enums import MessageStatus
from alumnet.models.message import Message


class RecipientState(IntEnum):
    """Delivery state of one message for one recipient, ordered by progress."""

    ABSENT = 0
    DELIVERED = 1
    READ = 2


def recipient_state(message: Message, user_id: str) -> RecipientState:
    """Return how far *message* has progressed for *user_id*."""
    if user_id in message.read_user_ids():
        return RecipientState.READ
    if user_id in message.delivered_user_ids():
        return RecipientState.DELIVERED
    return RecipientState.ABSENT


def advance(current: RecipientState, target: RecipientState) -> RecipientState:
    """Move towards *target*, ignoring requests to go backwards."""
    return max(current, target)


def required_receipts(current: RecipientState, target: RecipientState) -> list[RecipientState]:
    """Receipts that must be appended to reach *target* from *current*.

    Reading a message that was never marked delivered records both, so that
    ``read`` always implies ``delivered``.
    """
    return [
        state
        for state in (RecipientState.DELIVERED, RecipientState.READ)
        if current < state <= target
    ]


def aggregate_status(message: Message, member_ids: Iterable[str]) -> MessageStatus:
    """Roll the per-recipient states up into the room-visible status.

    ``read`` when every member other than the sender has read the message,
    ``delivered`` when at least one of them has it delivered, else ``sent``.
    A room whose only member is the sender has no recipients and stays
    ``sent``.
    """
    recipients = {m for m in member_ids if m != message.sender_id}
    if not recipients:
        return MessageStatus.SENT
    states = [recipient_state(message, r) for r in recipients]
    if all(s is RecipientState.READ for s in states):
        return MessageStatus.READ
    if any(s >= RecipientState.DELIVERED for s in states):
        return MessageStatus.DELIVERED
    return MessageStatus.SENT
