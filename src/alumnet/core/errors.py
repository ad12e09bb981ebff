"""Error taxonomy for the messaging core."""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

logger = logging.getLogger("alumnet.errors")

P = ParamSpec("P")
T = TypeVar("T")

__all__ = [
    "BadRequest",
    "ChatError",
    "Conflict",
    "Forbidden",
    "InternalError",
    "NotFound",
    "Unauthorized",
    "internal_on_failure",
]


class ChatError(Exception):
    """Base exception for all alumnet errors.

    ``code`` is the stable machine-readable kind sent to clients and
    ``status_code`` the HTTP status the REST surface answers with.
    """

    code = "internal"
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class Unauthorized(ChatError):
    """Missing or invalid identity."""

    code = "unauthorized"
    status_code = 401


class Forbidden(ChatError):
    """Authenticated, but not a member or admin of the room."""

    code = "forbidden"
    status_code = 403


class NotFound(ChatError):
    """Room, message, user, post or comment does not exist."""

    code = "not_found"
    status_code = 404


class BadRequest(ChatError):
    """Malformed input (empty message, self-removal, bad paging)."""

    code = "bad_request"
    status_code = 400


class Conflict(ChatError):
    """Duplicate state transition, e.g. promoting an existing admin."""

    code = "conflict"
    status_code = 409


class InternalError(ChatError):
    """Storage or other unexpected failure. Details are never sent to clients."""

    code = "internal"
    status_code = 500


def internal_on_failure(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    """Re-raise anything that is not a ``ChatError`` as ``InternalError``.

    The original exception is logged and chained as ``__cause__``; its
    message never reaches clients.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return await func(*args, **kwargs)
        except ChatError:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure in %s", func.__qualname__)
            raise InternalError("Internal server error") from exc

    return wrapper
