"""Session and message store implementations."""

from canvaspartner.conversation.stores.inmemory import (
    InMemoryMessageStore,
    InMemorySessionStore,
)
from canvaspartner.conversation.stores.postgres import (
    PostgresMessageStore,
    PostgresSessionStore,
)

__all__ = [
    "InMemoryMessageStore",
    "InMemorySessionStore",
    "PostgresMessageStore",
    "PostgresSessionStore",
]
