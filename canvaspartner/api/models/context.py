"""Request and user context models."""

from pydantic import BaseModel, Field


class UserContext(BaseModel):
    """Authenticated caller, taken from the bearer token."""

    user_id: str = Field(..., min_length=1, description="Token subject")
    email: str | None = Field(default=None, description="Email claim, if present")


class RequestContext(BaseModel):
    """Identifiers bound to every log event of a request."""

    trace_id: str = Field(default="", description="OpenTelemetry trace id or request id")
    span_id: str = Field(default="", description="OpenTelemetry span id")
    request_id: str = Field(..., description="Generated per request")
    user_id: str | None = None
    session_id: str | None = None
