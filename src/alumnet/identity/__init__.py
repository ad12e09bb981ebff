"""Connection authentication."""

from alumnet.identity.base import Authenticator
from alumnet.identity.jwt import JWTAuthenticator
from alumnet.identity.mock import StaticAuthenticator

__all__ = ["Authenticator", "JWTAuthenticator", "StaticAuthenticator"]
