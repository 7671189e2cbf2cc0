"""API exception hierarchy for consistent error handling.

All API exceptions inherit from CanvasPartnerAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate consistent error responses.
"""

from canvaspartner.api.models.errors import ErrorCode, ErrorDetail


class CanvasPartnerAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: list[ErrorDetail] | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class InvalidRequestError(CanvasPartnerAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class SessionNotFoundError(CanvasPartnerAPIError):
    """Raised when a session is missing or owned by someone else."""

    status_code = 404
    error_code = ErrorCode.SESSION_NOT_FOUND


class CanvasNotFoundError(CanvasPartnerAPIError):
    """Raised when a canvas is missing or not visible to the caller."""

    status_code = 404
    error_code = ErrorCode.CANVAS_NOT_FOUND


class LLMProviderError(CanvasPartnerAPIError):
    """Raised when the model provider fails or is unavailable."""

    status_code = 502
    error_code = ErrorCode.LLM_ERROR
