"""JWT authenticator backed by PyJWT."""

from __future__ import annotations

import logging
from typing import Any

from alumnet.identity.base import Authenticator

logger = logging.getLogger("alumnet.identity.jwt")


class JWTAuthenticator(Authenticator):
    """Verifies HMAC-signed tokens issued by the account service.

    The user ID is read from the ``userId`` claim. Expired, malformed or
    wrongly signed tokens are rejected.

    Requires the ``PyJWT`` package::

        pip install alumnet[jwt]
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        user_claim: str = "userId",
    ) -> None:
        if not secret:
            raise ValueError("A JWT secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self._user_claim = user_claim

    async def authenticate(self, token: str) -> str | None:
        try:
            import jwt
        except ImportError as exc:
            raise ValueError(
                "PyJWT is required for JWT authentication. "
                "Install it with: pip install 'alumnet[jwt]'"
            ) from exc

        token = token.removeprefix("Bearer ").strip()
        if not token:
            return None
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": True},
            )
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected token: %s", exc)
            return None

        user_id = claims.get(self._user_claim)
        if user_id is None or user_id == "":
            logger.debug("Token has no %s claim", self._user_claim)
            return None
        return str(user_id)

    def issue(self, user_id: str, **claims: Any) -> str:
        """Sign a token for *user_id*. Used by tests and local tooling."""
        import jwt

        return jwt.encode(
            {self._user_claim: user_id, **claims}, self._secret, algorithm=self._algorithm
        )
