"""Enums for conversation domain."""

from enum import Enum


class MessageRole(str, Enum):
    """Author of a persisted chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"
