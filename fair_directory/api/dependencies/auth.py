"""Authentication dependencies for bearer token validation.

Callers present an app token in the Authorization header. The token is
verified with PyJWT against the shared signing secret, and the role
claim decides access to administrative routes.

Token flow:
1. The session layer issues an app token after login
2. Clients send it as `Authorization: Bearer <token>`
3. get_current_user validates it and returns an AuthenticatedUser
4. require_admin additionally checks the role claim
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import ExpiredSignatureError, InvalidTokenError
from pydantic import ValidationError

from fair_directory.core.config import settings
from fair_directory.schemas.auth import AuthenticatedUser, TokenPayload
from fair_directory.services.app_token_service import (
    AppTokenService,
    get_app_token_service,
)

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(error: str, description: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "error_description": description},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(security)
    ],
    token_service: Annotated[AppTokenService, Depends(get_app_token_service)],
) -> AuthenticatedUser:
    """
    FastAPI dependency to validate the bearer token and extract the caller.

    Args:
        credentials: HTTP Bearer credentials from Authorization header
        token_service: Verifies token signature and standard claims

    Returns:
        AuthenticatedUser: Caller identity and role

    Raises:
        HTTPException: 401 Unauthorized if token is missing, expired or invalid

    Example:
        >>> @router.get("/me")
        >>> async def me(user: CurrentUser):
        ...     return {"user_id": user.user_id}
    """
    if credentials is None:
        logger.warning("Missing Authorization header")
        raise _unauthorized(
            "missing_token",
            "Authorization header with Bearer token is required",
        )

    try:
        claims = token_service.validate_token(credentials.credentials)
    except ExpiredSignatureError:
        logger.warning("App token expired")
        raise _unauthorized("expired_token", "App token has expired")
    except InvalidTokenError as e:
        logger.warning(f"App token validation failed: {e}")
        raise _unauthorized("invalid_token", "App token validation failed")

    try:
        payload = TokenPayload.model_validate(claims)
    except ValidationError:
        logger.warning("App token missing required claims")
        raise _unauthorized("invalid_token", "App token missing required claims")

    return AuthenticatedUser(
        user_id=payload.sub,
        role=payload.role,
        email=payload.email,
        name=payload.name,
    )


# Type alias for dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> AuthenticatedUser:
    """
    Dependency that requires the administrative role.

    Raises:
        HTTPException: 403 Forbidden if the caller is not an administrator
    """
    if not user.is_admin(settings.ADMIN_ROLE):
        logger.warning(
            "Administrative role required",
            extra={"user_id": user.user_id, "role": user.role},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "insufficient_role",
                "error_description": "This endpoint requires an administrator account",
            },
        )
    return user


# Type alias for routes restricted to administrators
AdminUser = Annotated[AuthenticatedUser, Depends(require_admin)]
