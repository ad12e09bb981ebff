"""Runnable entry point: ``python -m alumnet.server`` or the ``alumnet-server`` script.

Requires the ``server`` extra::

    pip install alumnet[server]

Configuration comes from ``ALUMNET_*`` environment variables (see
``ChatSettings``). ``ALUMNET_JWT_SECRET`` must be set.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from alumnet.config import ChatSettings
from alumnet.core.framework import ChatHub
from alumnet.identity.jwt import JWTAuthenticator

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger("alumnet.server")


def build_app(settings: ChatSettings | None = None) -> FastAPI:
    """Create the FastAPI app with an in-memory hub and JWT authentication."""
    from alumnet.transport.http import create_app

    settings = settings or ChatSettings.from_env()
    if settings.jwt_secret is None:
        raise ValueError("ALUMNET_JWT_SECRET is required")
    authenticator = JWTAuthenticator(
        settings.jwt_secret.get_secret_value(), algorithm=settings.jwt_algorithm
    )
    return create_app(ChatHub(settings=settings), authenticator, settings)


def main() -> None:
    import uvicorn

    settings = ChatSettings.from_env()
    logging.basicConfig(level=settings.log_level.upper())
    app = build_app(settings)
    host = os.environ.get("HOST", "0.0.0.0")  # noqa: S104  # nosec B104
    port = int(os.environ.get("PORT", "5000"))
    logger.info("Starting alumnet on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
