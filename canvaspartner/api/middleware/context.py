"""Request context middleware for observability."""

import uuid
from collections.abc import Awaitable, Callable
from contextvars import ContextVar

import structlog
from fastapi import Request, Response
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from canvaspartner.api.models.context import RequestContext
from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)

_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_request_context() -> RequestContext | None:
    return _request_context.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds trace and request ids for every request.

    The ids are stored in a context variable, bound into structlog's
    contextvars and echoed back as X-Request-ID / X-Trace-ID headers.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        span_context = trace.get_current_span().get_span_context()
        trace_id = format(span_context.trace_id, "032x") if span_context.is_valid else ""
        span_id = format(span_context.span_id, "016x") if span_context.is_valid else ""
        request_id = str(uuid.uuid4())

        context = RequestContext(
            trace_id=trace_id or request_id,
            span_id=span_id,
            request_id=request_id,
        )
        token = _request_context.set(context)
        request.state.context = context
        structlog.contextvars.bind_contextvars(
            trace_id=context.trace_id,
            request_id=context.request_id,
        )

        logger.debug("request_started", method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("trace_id", "request_id")
            _request_context.reset(token)

        logger.debug(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        response.headers["X-Request-ID"] = context.request_id
        if context.trace_id:
            response.headers["X-Trace-ID"] = context.trace_id
        return response


def update_request_context(
    *,
    user_id: str | None = None,
    session_id: str | None = None,
) -> None:
    """Add identifiers to the current request context as they become known."""
    current = get_request_context()
    if current is None:
        return
    if user_id:
        current.user_id = user_id
    if session_id:
        current.session_id = session_id
