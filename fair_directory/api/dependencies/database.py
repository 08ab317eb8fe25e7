"""
Database session dependencies.

Request handlers share one session per request (`get_db`). Merges own
their transaction boundary instead and take the session factory
(`get_session_factory`) so each merge opens its own unit of work.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fair_directory.core.database import AsyncSessionLocal

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session: committed when the handler returns, rolled
    back (and the error re-raised) when it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning(
                "Request session rolled back",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for operations that manage their own transaction."""
    return AsyncSessionLocal
