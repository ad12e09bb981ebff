"""Static authenticator for testing."""

from __future__ import annotations

from alumnet.identity.base import Authenticator


class StaticAuthenticator(Authenticator):
    """Resolves tokens from a pre-configured ``token -> user_id`` mapping."""

    def __init__(self, tokens: dict[str, str] | None = None) -> None:
        self._tokens = tokens or {}

    def add(self, token: str, user_id: str) -> None:
        self._tokens[token] = user_id

    async def authenticate(self, token: str) -> str | None:
        return self._tokens.get(token)
