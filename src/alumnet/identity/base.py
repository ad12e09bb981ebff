"""Abstract base class for connection authentication."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Authenticator(ABC):
    """Resolves a bearer token to the ID of the user presenting it."""

    @abstractmethod
    async def authenticate(self, token: str) -> str | None:
        """Validate a token.

        Args:
            token: The raw token, without any ``Bearer`` prefix.

        Returns:
            The authenticated user ID, or ``None`` if the token is rejected.
        """
        ...
