"""All string enums for alumnet."""

from __future__ import annotations

from enum import StrEnum, unique


@unique
class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    FILE = "file"


@unique
class MessageStatus(StrEnum):
    """Aggregate delivery status of a message across its recipients."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


@unique
class ServerEvent(StrEnum):
    """Event names emitted to connected clients."""

    NEW_MESSAGE = "newMessage"
    ROOM_UPDATED = "roomUpdated"
    MESSAGE_READ = "messageRead"
    MESSAGES_DELIVERED = "messagesDelivered"
    USER_TYPING = "userTyping"
    USER_ONLINE = "userOnline"
    USER_OFFLINE = "userOffline"
    ONLINE_USERS = "onlineUsers"
    POST_LIKE_UPDATE = "postLikeUpdate"
    COMMENT_LIKE_UPDATE = "commentLikeUpdate"
    NEW_POST = "newPost"
    NEW_COMMENT = "newComment"
    COMMENT_EDITED = "commentEdited"
    COMMENT_DELETED = "commentDeleted"
    ERROR = "error"


@unique
class ClientEvent(StrEnum):
    """Event names accepted from connected clients."""

    JOIN_ROOM = "joinRoom"
    LEAVE_ROOM = "leaveRoom"
    SEND_MESSAGE = "sendMessage"
    MARK_AS_READ = "markAsRead"
    TYPING_START = "typingStart"
    TYPING_STOP = "typingStop"
    GET_ONLINE_USERS = "getOnlineUsers"
    JOIN_POST = "joinPost"
    LEAVE_POST = "leavePost"
    POST_LIKED = "postLiked"
    COMMENT_LIKED = "commentLiked"
