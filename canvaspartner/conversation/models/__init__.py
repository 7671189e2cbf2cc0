"""Conversation domain models.

Contains the Pydantic models for persisted conversation state:
- Sessions, one per client-supplied session identifier
- Messages, the append-only log replayed to the model
"""

from canvaspartner.conversation.models.enums import MessageRole
from canvaspartner.conversation.models.session import Message, Session

__all__ = [
    "MessageRole",
    "Message",
    "Session",
]
