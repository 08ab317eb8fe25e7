"""
Database infrastructure.

This module provides the async SQLAlchemy engine, session factory,
and declarative base for all database models.
"""

import logging
import uuid
from typing import Any
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import Pool

from fair_directory.core.config import settings

# Configure logger
logger = logging.getLogger(__name__)


def resolve_database_url(url: str) -> str:
    """Rewrite a plain postgresql:// URL to use the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def engine_options(url: str) -> dict[str, Any]:
    """
    Build engine keyword arguments for the given database URL.

    SQLite (used by the test suite) does not accept queue pool sizing, so
    pool options are only applied to server databases.
    """
    options: dict[str, Any] = {
        "echo": settings.DB_ECHO,
        "future": True,
    }
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_reset_on_return="rollback",
        )
    return options


database_url = resolve_database_url(settings.DATABASE_URL)

# Create async engine with connection pooling
engine: AsyncEngine = create_async_engine(database_url, **engine_options(database_url))

# Create async session factory with explicit transaction control
AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Don't expire objects after commit (avoid extra queries)
    autoflush=False,  # Explicit flush control
)


class Base(DeclarativeBase):
    """
    Base class for all database models.

    Provides common columns that all models inherit:
    - id: UUID primary key
    - created_at: Timezone-aware timestamp of record creation (UTC)
    - updated_at: Timezone-aware timestamp of last update (UTC)
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        insert_default=uuid.uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


@event.listens_for(Pool, "connect")
def receive_connect(dbapi_conn: Any, connection_record: Any) -> None:
    """Log when a new connection is established to the database."""
    logger.debug("Database connection established")


@event.listens_for(Pool, "checkin")
def receive_checkin(dbapi_conn: Any, connection_record: Any) -> None:
    """Log when a connection is returned to the pool."""
    logger.debug("Database connection returned to pool")
