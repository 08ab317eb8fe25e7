"""
Repository for catalog storage operations.

This module implements the Repository pattern for the directory catalog
(venues, events, vendors, promoters and their dependent rows). Duplicate
detection and merging depend on this abstraction rather than issuing
queries directly, which keeps the merge algorithm independent of the
storage engine and lets tests substitute an in-memory database.

The operations are intentionally generic over the mapped model: merges
only ever need to find, count, re-point and delete rows by predicate.

Usage:
    from fair_directory.repositories.catalog import UnitOfWork

    async with UnitOfWork(session_factory) as uow:
        venue = await uow.catalog.find_one(Venue, venue_id)
        await uow.catalog.update_many(
            Event, [Event.venue_id == duplicate_id], {"venue_id": venue_id}
        )
        # Commit happens on clean exit, rollback on any exception
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Annotated, Any, Iterable, Sequence, TypeVar
from uuid import UUID

from fastapi import Depends
from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction, async_sessionmaker
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.orm.interfaces import ORMOption

from fair_directory.api.dependencies.database import get_db
from fair_directory.core.database import Base

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Base)


class CatalogRepositoryProtocol(ABC):
    """Abstract interface for catalog storage operations.

    This protocol defines the contract that any implementation must follow.
    Merge logic is written against it so it can be exercised with a mock
    repository or a different storage backend.
    """

    @abstractmethod
    async def find_one(
        self,
        model: type[M],
        entity_id: UUID,
        options: Sequence[ORMOption] = (),
        refresh: bool = False,
    ) -> M | None:
        """Get a record by primary key.

        Args:
            model: Mapped model class
            entity_id: Primary key
            options: Loader options (e.g., selectinload of relationships)
            refresh: Overwrite any stale identity-map state with database values

        Returns:
            The record or None if not found
        """
        pass

    @abstractmethod
    async def find_many(
        self,
        model: type[M],
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        options: Sequence[ORMOption] = (),
    ) -> list[M]:
        """List records matching all criteria, in the given order."""
        pass

    @abstractmethod
    async def find_values(
        self,
        column: InstrumentedAttribute[Any],
        *criteria: ColumnElement[bool],
    ) -> list[Any]:
        """Project a single column of the rows matching all criteria."""
        pass

    @abstractmethod
    async def count(self, model: type[M], *criteria: ColumnElement[bool]) -> int:
        """Count records matching all criteria."""
        pass

    @abstractmethod
    async def count_by(
        self,
        column: InstrumentedAttribute[Any],
        values: Iterable[Any],
    ) -> dict[Any, int]:
        """Count rows grouped by column, restricted to the given values.

        Values with no rows are absent from the result.
        """
        pass

    @abstractmethod
    async def add(self, instance: M) -> M:
        """Insert a new record and flush it so defaults are populated."""
        pass

    @abstractmethod
    async def update_many(
        self,
        model: type[M],
        criteria: Sequence[ColumnElement[bool]],
        values: dict[str, Any],
    ) -> int:
        """Update all rows matching criteria.

        Returns:
            Number of rows affected
        """
        pass

    @abstractmethod
    async def delete_many(self, model: type[M], *criteria: ColumnElement[bool]) -> int:
        """Delete all rows matching criteria and return the number deleted."""
        pass

    @abstractmethod
    async def delete_one(self, model: type[M], entity_id: UUID) -> int:
        """Delete a record by primary key and return the number deleted (0 or 1)."""
        pass


class CatalogRepository(CatalogRepositoryProtocol):
    """SQLAlchemy implementation of the catalog repository.

    Bulk statements run with synchronize_session=False: callers that need
    current state after a bulk write re-read with refresh=True.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session
        """
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def find_one(
        self,
        model: type[M],
        entity_id: UUID,
        options: Sequence[ORMOption] = (),
        refresh: bool = False,
    ) -> M | None:
        query = select(model).where(model.id == entity_id)
        if options:
            query = query.options(*options)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def find_many(
        self,
        model: type[M],
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        options: Sequence[ORMOption] = (),
    ) -> list[M]:
        query = select(model)
        if criteria:
            query = query.where(*criteria)
        if options:
            query = query.options(*options)
        if order_by:
            query = query.order_by(*order_by)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def find_values(
        self,
        column: InstrumentedAttribute[Any],
        *criteria: ColumnElement[bool],
    ) -> list[Any]:
        query = select(column)
        if criteria:
            query = query.where(*criteria)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def count(self, model: type[M], *criteria: ColumnElement[bool]) -> int:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        result = await self._session.execute(query)
        return result.scalar_one()

    async def count_by(
        self,
        column: InstrumentedAttribute[Any],
        values: Iterable[Any],
    ) -> dict[Any, int]:
        values = list(values)
        if not values:
            return {}
        result = await self._session.execute(
            select(column, func.count()).where(column.in_(values)).group_by(column)
        )
        return {key: total for key, total in result.all()}

    async def add(self, instance: M) -> M:
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def update_many(
        self,
        model: type[M],
        criteria: Sequence[ColumnElement[bool]],
        values: dict[str, Any],
    ) -> int:
        result = await self._session.execute(
            update(model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_many(self, model: type[M], *criteria: ColumnElement[bool]) -> int:
        result = await self._session.execute(
            delete(model).where(*criteria).execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_one(self, model: type[M], entity_id: UUID) -> int:
        return await self.delete_many(model, model.id == entity_id)


# =============================================================================
# Unit of Work
# =============================================================================


class UnitOfWork:
    """
    One database transaction spanning several repository calls.

    Opens a fresh session from the factory, begins a transaction on enter,
    commits on clean exit and rolls back when the block raises. The
    exception is never suppressed.

    Pass isolation_level to run the transaction at a level other than the
    engine default (e.g. "SERIALIZABLE"); it applies to this unit of work
    only and is reset when the connection returns to the pool.

    Example:
        async with UnitOfWork(AsyncSessionLocal, isolation_level="SERIALIZABLE") as uow:
            await uow.catalog.delete_one(Vendor, vendor_id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        isolation_level: str | None = None,
    ):
        self._session_factory = session_factory
        self._isolation_level = isolation_level
        self._session: AsyncSession | None = None
        self._transaction: AsyncSessionTransaction | None = None
        self.catalog: CatalogRepository | None = None

    async def __aenter__(self) -> UnitOfWork:
        self._session = self._session_factory()
        try:
            self._transaction = await self._session.begin()
            if self._isolation_level is not None:
                # First connection checkout of the transaction; sets its isolation
                await self._session.connection(
                    execution_options={"isolation_level": self._isolation_level}
                )
        except Exception:
            await self._session.close()
            self._session = None
            self._transaction = None
            raise
        self.catalog = CatalogRepository(self._session)
        logger.debug(
            "Unit of work started",
            extra={"isolation_level": self._isolation_level or "default"},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._session is None or self._transaction is None:
            raise RuntimeError("UnitOfWork exited without being entered")
        try:
            if exc_type is None:
                await self._transaction.commit()
                logger.debug("Unit of work committed")
            else:
                await self._transaction.rollback()
                logger.warning(
                    "Unit of work rolled back due to exception",
                    extra={"error": str(exc)},
                )
        finally:
            await self._session.close()
            self._session = None
            self._transaction = None
            self.catalog = None


# Dependency injection


async def get_catalog_repository(
    db: AsyncSession = Depends(get_db),
) -> CatalogRepository:
    """FastAPI dependency for CatalogRepository.

    Args:
        db: Request-scoped database session from dependency injection

    Returns:
        CatalogRepository instance
    """
    return CatalogRepository(db)


# Type alias for cleaner dependency injection
CatalogRepo = Annotated[CatalogRepository, Depends(get_catalog_repository)]
