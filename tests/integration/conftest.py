"""Fixtures shared by the database-backed tests."""

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fair_directory.repositories.catalog import CatalogRepository


@pytest.fixture
async def repository(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[CatalogRepository, None]:
    """Repository over its own session; uncommitted writes are rolled back."""
    async with session_factory() as session:
        yield CatalogRepository(session)
        await session.rollback()
