"""JWT authentication for API requests."""

import os
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from canvaspartner.api.middleware.context import update_request_context
from canvaspartner.api.models.context import UserContext
from canvaspartner.config import get_settings
from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)

JWT_SECRET_ENV = "CANVASPARTNER_JWT_SECRET"

# Security scheme for OpenAPI docs
security_scheme = HTTPBearer(auto_error=False)


def get_jwt_secret() -> str:
    """Get JWT secret from environment."""
    secret = os.environ.get(JWT_SECRET_ENV)
    if not secret:
        raise RuntimeError(f"{JWT_SECRET_ENV} environment variable not set")
    return secret


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_user_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
) -> UserContext:
    """Validate the bearer token and return the caller.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    if credentials is None:
        logger.warning("auth_missing_token", path=request.url.path)
        raise _unauthorized("Missing authentication token")

    try:
        payload = jwt.decode(
            credentials.credentials,
            get_jwt_secret(),
            algorithms=[get_settings().api.jwt_algorithm],
        )
    except JWTError as e:
        logger.warning("auth_jwt_error", error=str(e), path=request.url.path)
        raise _unauthorized("Invalid or expired token") from None

    subject = payload.get("sub")
    if not subject:
        logger.warning("auth_missing_subject", path=request.url.path)
        raise _unauthorized("Token missing sub claim")

    try:
        user = UserContext(user_id=str(subject), email=payload.get("email"))
    except ValidationError as e:
        logger.warning("auth_validation_error", error=str(e), path=request.url.path)
        raise _unauthorized("Invalid token claims") from None

    update_request_context(user_id=user.user_id)
    return user


async def get_optional_user_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
) -> UserContext | None:
    """Like get_user_context, but anonymous callers get None."""
    if credentials is None:
        return None
    return await get_user_context(request, credentials)


# Type aliases for dependency injection
UserContextDep = Annotated[UserContext, Depends(get_user_context)]
OptionalUserContextDep = Annotated[UserContext | None, Depends(get_optional_user_context)]
