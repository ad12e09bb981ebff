"""alumnet - real-time messaging and presence core for the alumni network."""

from alumnet._version import __version__
from alumnet.config import ChatSettings
from alumnet.core.delivery import RecipientState, aggregate_status, recipient_state
from alumnet.core.errors import (
    BadRequest,
    ChatError,
    Conflict,
    Forbidden,
    InternalError,
    NotFound,
    Unauthorized,
)
from alumnet.core.feed import FeedNotifier, InMemoryPostSource, PostSource
from alumnet.core.framework import ChatHub
from alumnet.core.locks import InMemoryLockManager, RoomLockManager
from alumnet.core.membership import RoomRegistry
from alumnet.core.messages import MessageStore
from alumnet.core.presence import PresenceTracker
from alumnet.core.typing_indicators import TypingTracker
from alumnet.core.unread import UnreadCounter
from alumnet.identity import Authenticator, JWTAuthenticator, StaticAuthenticator
from alumnet.models import (
    ClientEvent,
    MediaRef,
    Message,
    MessageStatus,
    MessageType,
    Receipt,
    Room,
    RoomSummary,
    ServerEvent,
    TypingEntry,
    User,
)
from alumnet.realtime import Broadcaster, InMemoryBroadcaster, RealtimeEvent
from alumnet.store import ChatStore, InMemoryStore
from alumnet.transport import ClientSession

__all__ = [
    "Authenticator",
    "BadRequest",
    "Broadcaster",
    "ChatError",
    "ChatHub",
    "ChatSettings",
    "ChatStore",
    "ClientEvent",
    "ClientSession",
    "Conflict",
    "FeedNotifier",
    "Forbidden",
    "InMemoryBroadcaster",
    "InMemoryLockManager",
    "InMemoryPostSource",
    "InMemoryStore",
    "InternalError",
    "JWTAuthenticator",
    "MediaRef",
    "Message",
    "MessageStatus",
    "MessageStore",
    "MessageType",
    "NotFound",
    "PostSource",
    "PresenceTracker",
    "RealtimeEvent",
    "Receipt",
    "RecipientState",
    "Room",
    "RoomLockManager",
    "RoomRegistry",
    "RoomSummary",
    "ServerEvent",
    "StaticAuthenticator",
    "TypingEntry",
    "TypingTracker",
    "Unauthorized",
    "UnreadCounter",
    "User",
    "__version__",
    "aggregate_status",
    "recipient_state",
]
