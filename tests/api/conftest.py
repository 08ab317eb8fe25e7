"""
API test fixtures.

The application's database dependencies are overridden to use the
per-test SQLite database, and requests go through httpx's ASGI
transport on the test's event loop.
"""

from typing import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fair_directory.api.dependencies.database import get_db, get_session_factory
from fair_directory.main import app
from fair_directory.models import User
from fair_directory.services.app_token_service import AppTokenService


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, bound to the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def headers_for(token_service: AppTokenService) -> Callable[[User], dict[str, str]]:
    """Bearer headers for an existing user, carrying the user's role."""

    def _headers(user: User) -> dict[str, str]:
        token = token_service.create_access_token(user_id=str(user.id), role=user.role.value)
        return {"Authorization": f"Bearer {token}"}

    return _headers
