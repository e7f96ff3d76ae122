"""Local collaborators consulted during a sync pass."""

from .endpoints import EndpointSource, StaticEndpointSource
from .message_store import InMemoryMessageStore, MessageStore

__all__ = [
    "EndpointSource",
    "StaticEndpointSource",
    "InMemoryMessageStore",
    "MessageStore",
]
