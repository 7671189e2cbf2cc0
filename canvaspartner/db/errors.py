"""Store error hierarchy.

Backends wrap driver-specific failures in these so callers handle one
family of exceptions regardless of where data lives.
"""


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):  # noqa: A001
    """The backing database could not be reached or failed mid-query."""
