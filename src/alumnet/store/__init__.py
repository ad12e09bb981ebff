"""Storage backends for the messaging core."""

from alumnet.store.base import ChatStore
from alumnet.store.memory import InMemoryStore

__all__ = ["ChatStore", "InMemoryStore"]
