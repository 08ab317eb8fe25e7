"""
Tests for the bearer token dependencies.

The dependencies are called directly; routing behavior is covered by
the API tests.
"""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from fair_directory.api.dependencies.auth import get_current_user, require_admin
from fair_directory.schemas.auth import AuthenticatedUser
from fair_directory.services.app_token_service import AppTokenService


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_valid_token_yields_user(self, token_service):
        token = token_service.create_access_token(
            user_id="3b0d8f7e-0000-4000-8000-000000000001",
            role="ADMIN",
            email="admin@example.com",
        )

        user = await get_current_user(bearer(token), token_service)

        assert user.user_id == "3b0d8f7e-0000-4000-8000-000000000001"
        assert user.role == "ADMIN"
        assert user.email == "admin@example.com"

    @pytest.mark.asyncio
    async def test_missing_credentials_is_401(self, token_service):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None, token_service)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "missing_token"
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    @pytest.mark.asyncio
    async def test_expired_token_is_401(self, token_service):
        token = token_service.create_access_token(
            user_id="u-1", role="ADMIN", expires_in=timedelta(minutes=-5)
        )

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(bearer(token), token_service)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "expired_token"

    @pytest.mark.asyncio
    async def test_foreign_signature_is_401(self, token_service):
        forged = AppTokenService(secret="some-other-secret-of-sufficient-length!!")
        token = forged.create_access_token(user_id="u-1", role="ADMIN")

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(bearer(token), token_service)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "invalid_token"

    @pytest.mark.asyncio
    async def test_garbage_token_is_401(self, token_service):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(bearer("not-a-jwt"), token_service)

        assert exc_info.value.status_code == 401


class TestRequireAdmin:
    @pytest.mark.asyncio
    async def test_admin_passes_through(self):
        admin = AuthenticatedUser(user_id="u-1", role="ADMIN")
        assert await require_admin(admin) is admin

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["USER", "VENDOR", "admin"])
    async def test_other_roles_are_403(self, role):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(AuthenticatedUser(user_id="u-1", role=role))

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["error"] == "insufficient_role"
