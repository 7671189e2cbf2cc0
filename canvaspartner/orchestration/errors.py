"""Errors raised while preparing a turn, before anything is streamed."""


class TurnRejectedError(Exception):
    """Base class for turns refused before the loop starts."""


class InvalidMessageError(TurnRejectedError):
    """The user message is empty or too long."""


class SessionAccessError(TurnRejectedError):
    """The session exists but belongs to another user."""
