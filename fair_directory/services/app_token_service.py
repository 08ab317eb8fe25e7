"""
App token service for issuing and validating bearer tokens.

Tokens are HMAC-signed JWTs (HS256 by default) carrying the caller's
user id as the subject and their account role as a custom claim. The
session layer issues them; this service verifies them on every request
and can issue them for tooling and tests.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from fair_directory.core.config import settings

logger = logging.getLogger(__name__)


class AppTokenService:
    """
    Signs and verifies app access tokens with a shared secret.

    Example:
        >>> service = AppTokenService()
        >>> token = service.create_access_token(user_id="...", role="ADMIN")
        >>> claims = service.validate_token(token)
    """

    def __init__(self, secret: str | None = None, algorithm: str | None = None):
        self._secret = secret or settings.APP_JWT_SECRET
        self._algorithm = algorithm or settings.APP_JWT_ALGORITHM

    def create_access_token(
        self,
        user_id: str,
        role: str,
        email: str | None = None,
        name: str | None = None,
        expires_in: timedelta = timedelta(hours=1),
    ) -> str:
        """
        Create a signed JWT access token.

        Args:
            user_id: User's internal ID (UUID)
            role: Account role (e.g., 'ADMIN')
            email: User's email address (optional)
            name: User's display name (optional)
            expires_in: Token lifetime

        Returns:
            Signed JWT token string
        """
        now = datetime.now(timezone.utc)
        exp = now + expires_in

        claims: dict[str, Any] = {
            "sub": user_id,
            "iss": settings.APP_JWT_ISSUER,
            "aud": settings.APP_JWT_AUDIENCE,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
            "role": role,
        }
        if email:
            claims["email"] = email
        if name:
            claims["name"] = name

        token = jwt.encode(payload=claims, key=self._secret, algorithm=self._algorithm)

        logger.debug(
            "App token created",
            extra={"user_id": user_id, "role": role, "exp": int(exp.timestamp())},
        )
        return token

    def validate_token(self, token: str) -> dict[str, Any]:
        """
        Validate and decode an app token.

        Raises:
            jwt.ExpiredSignatureError: If token is expired
            jwt.InvalidSignatureError: If signature is invalid
            jwt.InvalidTokenError: For other validation errors
        """
        return jwt.decode(
            jwt=token,
            key=self._secret,
            algorithms=[self._algorithm],
            issuer=settings.APP_JWT_ISSUER,
            audience=settings.APP_JWT_AUDIENCE,
        )


_app_token_service: AppTokenService | None = None


def get_app_token_service() -> AppTokenService:
    """Get the process-wide AppTokenService."""
    global _app_token_service
    if _app_token_service is None:
        _app_token_service = AppTokenService()
    return _app_token_service
