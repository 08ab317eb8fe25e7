"""
Pytest configuration and fixtures for testing.

Provides an isolated SQLite database per test (through aiosqlite, with
foreign keys enforced), a session factory bound to it, a catalog
builder for seeding records, and bearer token helpers.
"""

import os

# Settings are read at import time; configure before any app module loads
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["APP_JWT_SECRET"] = "test-secret-key-with-at-least-32-bytes!"
os.environ["OTEL_ENABLED"] = "false"
os.environ["LOG_JSON"] = "false"

from pathlib import Path  # noqa: E402
from typing import Any, AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from fair_directory.core.database import Base  # noqa: E402
import fair_directory.models  # noqa: E402,F401
from fair_directory.services.app_token_service import AppTokenService  # noqa: E402
from tests.factories import CatalogBuilder  # noqa: E402


def pytest_configure(config):
    """
    Load .env.test when present so developers can point the suite at
    other settings without editing code.
    """
    from dotenv import load_dotenv

    test_env_path = Path(__file__).parent.parent / ".env.test"
    if test_env_path.exists():
        load_dotenv(test_env_path, override=True)


def _enable_sqlite_foreign_keys(dbapi_conn: Any, connection_record: Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh file-backed SQLite database with the full schema."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'fair_directory.db'}",
        poolclass=NullPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application's."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """A session for reading back state; rolled back after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def catalog(session_factory: async_sessionmaker[AsyncSession]) -> CatalogBuilder:
    """Builder that commits seeded records immediately."""
    return CatalogBuilder(session_factory)


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest.fixture
def token_service() -> AppTokenService:
    return AppTokenService()


@pytest.fixture
def admin_headers(token_service: AppTokenService) -> dict[str, str]:
    import uuid

    token = token_service.create_access_token(user_id=str(uuid.uuid4()), role="ADMIN")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(token_service: AppTokenService) -> dict[str, str]:
    import uuid

    token = token_service.create_access_token(user_id=str(uuid.uuid4()), role="USER")
    return {"Authorization": f"Bearer {token}"}
