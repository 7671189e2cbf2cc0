"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for API responses.

    The same codes are used in the `error` event of the chat stream.
    """

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """Missing or invalid credentials."""

    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    """The session does not exist or belongs to another user."""

    CANVAS_NOT_FOUND = "CANVAS_NOT_FOUND"
    """The canvas does not exist or is not visible to the user."""

    LLM_ERROR = "LLM_ERROR"
    """The model provider returned an error or was unavailable."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    """The field that caused the error, if applicable."""

    message: str
    """Human-readable error description."""


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | None = None
    """Additional error details for validation failures."""


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "SESSION_NOT_FOUND",
                "message": "Session abc does not exist"
            }
        }
    """

    error: ErrorBody
