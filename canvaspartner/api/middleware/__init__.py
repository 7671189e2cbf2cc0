"""API middleware: authentication and request context."""

from canvaspartner.api.middleware.auth import (
    OptionalUserContextDep,
    UserContextDep,
    get_user_context,
)
from canvaspartner.api.middleware.context import (
    RequestContextMiddleware,
    get_request_context,
)

__all__ = [
    "OptionalUserContextDep",
    "RequestContextMiddleware",
    "UserContextDep",
    "get_request_context",
    "get_user_context",
]
