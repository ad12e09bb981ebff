"""Client-facing transports.

``protocol`` and ``session`` depend only on pydantic; ``http`` needs the
``fastapi`` extra and is imported explicitly.
"""

from alumnet.transport.protocol import ClientFrame, parse_client_event
from alumnet.transport.session import ClientSession

__all__ = ["ClientFrame", "ClientSession", "parse_client_event"]
