"""
MergeService for executing entity merges.

This module provides the service that folds a duplicate catalog record
into a primary record of the same kind. A merge:
1. Resolves both records and plans the dependent-row work
2. Re-points plain foreign keys (events of a venue or promoter)
3. Re-points join-table rows, discarding those that collide
4. Accumulates counters into the primary (event view counts)
5. Re-points favorites, discarding those that collide
6. Deletes the duplicate
7. Re-reads the primary for the result

All steps run in one SERIALIZABLE transaction. Any failure (including a
serialization conflict with a concurrent writer) rolls the whole merge
back and surfaces as MergeFailedError; the caller may simply retry.
Once a merge has committed, a retry fails fast with EntityNotFoundError
because the duplicate no longer exists.

Example:
    from fair_directory.services.duplicates import MergeService

    service = MergeService(AsyncSessionLocal)
    result = await service.execute_merge("vendors", primary_id, duplicate_id)
    print(result.transferred_relationships.event_vendors)
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import aliased

from fair_directory.models import UserFavorite
from fair_directory.observability import entity_merges_total, tracer
from fair_directory.repositories.catalog import CatalogRepositoryProtocol, UnitOfWork
from fair_directory.schemas.duplicates import (
    DuplicateEntityType,
    MergeResponse,
    RelationshipCounts,
)
from fair_directory.services.duplicates.descriptors import (
    MergeDescriptor,
    get_descriptor,
    to_summary,
)
from fair_directory.services.duplicates.exceptions import (
    DuplicateValidationError,
    EntityNotFoundError,
    MergeFailedError,
)
from fair_directory.services.duplicates.preview import (
    MergePlan,
    dependent_counts,
    plan_merge,
)

logger = logging.getLogger(__name__)

# Counter accumulation and the duplicate-row delete must see one consistent
# snapshot; a concurrent writer aborts the merge instead of losing an update
MERGE_ISOLATION_LEVEL = "SERIALIZABLE"


class MergeService:
    """
    Executes merges, each in its own unit of work.

    Args:
        session_factory: Source of fresh sessions; one per merge
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def execute_merge(
        self,
        kind: DuplicateEntityType | str,
        primary_id: UUID,
        duplicate_id: UUID,
    ) -> MergeResponse:
        """
        Merge duplicate_id into primary_id.

        Args:
            kind: Entity kind of both records
            primary_id: Surviving record
            duplicate_id: Record to absorb and delete

        Returns:
            MergeResponse with the refreshed primary, transfer counts
            and the deleted id

        Raises:
            DuplicateValidationError: Unknown kind or identical ids
            EntityNotFoundError: Either id does not resolve (nothing changed)
            MergeFailedError: Transaction aborted (nothing changed)
        """
        descriptor = get_descriptor(kind)
        entity_type = descriptor.kind.value

        logger.info(
            "Starting merge",
            extra={
                "entity_type": entity_type,
                "primary_id": str(primary_id),
                "duplicate_id": str(duplicate_id),
            },
        )

        with tracer.start_as_current_span("duplicates.merge") as span:
            span.set_attribute("duplicates.entity_type", entity_type)
            span.set_attribute("duplicates.primary_id", str(primary_id))
            span.set_attribute("duplicates.duplicate_id", str(duplicate_id))

            try:
                async with UnitOfWork(
                    self._session_factory, isolation_level=MERGE_ISOLATION_LEVEL
                ) as uow:
                    result = await self._merge(
                        uow.catalog, descriptor, primary_id, duplicate_id
                    )
            except (EntityNotFoundError, DuplicateValidationError):
                entity_merges_total.labels(entity_type=entity_type, outcome="rejected").inc()
                raise
            except MergeFailedError:
                entity_merges_total.labels(entity_type=entity_type, outcome="failed").inc()
                raise
            except Exception as e:
                entity_merges_total.labels(entity_type=entity_type, outcome="failed").inc()
                logger.error(f"Merge failed: {e}", exc_info=True)
                raise MergeFailedError(f"Merge operation failed: {e}") from e

        entity_merges_total.labels(entity_type=entity_type, outcome="merged").inc()
        logger.info(
            "Merge completed",
            extra={
                "entity_type": entity_type,
                "primary_id": str(primary_id),
                "deleted_id": str(duplicate_id),
                "transferred": result.transferred_relationships.model_dump(exclude_none=True),
            },
        )
        return result

    async def _merge(
        self,
        catalog: CatalogRepositoryProtocol,
        descriptor: MergeDescriptor,
        primary_id: UUID,
        duplicate_id: UUID,
    ) -> MergeResponse:
        plan = await plan_merge(catalog, descriptor, primary_id, duplicate_id)

        transferred = await self._transfer_relationships(catalog, plan)
        await self._accumulate_counters(catalog, plan)
        favorites = await self._transfer_favorites(catalog, plan)
        await self._delete_duplicate(catalog, plan)

        primary = await catalog.find_one(
            descriptor.model,
            primary_id,
            options=descriptor.load_options,
            refresh=True,
        )
        if primary is None:
            raise MergeFailedError(
                f"{descriptor.kind.value} {primary_id} disappeared during merge"
            )
        counts = await dependent_counts(catalog, descriptor, [primary_id])

        return MergeResponse(
            success=True,
            type=descriptor.kind,
            merged_entity=to_summary(descriptor, primary, counts[primary_id]),
            transferred_relationships=RelationshipCounts(
                **transferred, favorites=favorites
            ),
            deleted_id=duplicate_id,
        )

    async def _transfer_relationships(
        self,
        catalog: CatalogRepositoryProtocol,
        plan: MergePlan,
    ) -> dict[str, int]:
        """Re-point dependent rows; returns rows re-pointed per label."""
        descriptor = plan.descriptor
        primary_id = plan.primary.id
        duplicate_id = plan.duplicate.id
        transferred: dict[str, int] = {}

        for transfer in descriptor.foreign_keys:
            transferred[transfer.label] = await catalog.update_many(
                transfer.model,
                [transfer.column == duplicate_id],
                {transfer.column.key: primary_id},
            )

        join = descriptor.join
        if join is not None:
            if plan.overlapping_counterparts:
                discarded = await catalog.delete_many(
                    join.model,
                    join.own_column == duplicate_id,
                    join.counterpart_column.in_(plan.overlapping_counterparts),
                )
                logger.debug(
                    "Discarded colliding join rows",
                    extra={"label": join.label, "discarded": discarded},
                )
            transferred[join.label] = await catalog.update_many(
                join.model,
                [join.own_column == duplicate_id],
                {join.own_column.key: primary_id},
            )

        return transferred

    async def _accumulate_counters(
        self,
        catalog: CatalogRepositoryProtocol,
        plan: MergePlan,
    ) -> None:
        """
        Add the duplicate's counters onto the primary.

        The amount is read from the duplicate row inside the UPDATE, not from
        the copy loaded by plan_merge, so increments committed since then count.
        """
        model = plan.descriptor.model
        duplicate = aliased(model)
        for counter in plan.descriptor.counters:
            amount = (
                select(func.coalesce(getattr(duplicate, counter), 0))
                .where(duplicate.id == plan.duplicate.id)
                .scalar_subquery()
            )
            await catalog.update_many(
                model,
                [model.id == plan.primary.id],
                {counter: getattr(model, counter) + amount},
            )

    async def _transfer_favorites(
        self,
        catalog: CatalogRepositoryProtocol,
        plan: MergePlan,
    ) -> int:
        """Re-point favorites; drop those whose user already favorites the primary."""
        favoritable_type = plan.descriptor.favoritable_type
        duplicate_id = plan.duplicate.id

        if plan.colliding_favorite_users:
            await catalog.delete_many(
                UserFavorite,
                UserFavorite.favoritable_type == favoritable_type,
                UserFavorite.favoritable_id == duplicate_id,
                UserFavorite.user_id.in_(plan.colliding_favorite_users),
            )

        return await catalog.update_many(
            UserFavorite,
            [
                UserFavorite.favoritable_type == favoritable_type,
                UserFavorite.favoritable_id == duplicate_id,
            ],
            {"favoritable_id": plan.primary.id},
        )

    async def _delete_duplicate(
        self,
        catalog: CatalogRepositoryProtocol,
        plan: MergePlan,
    ) -> None:
        """Delete the duplicate, which must still exist exactly once."""
        deleted = await catalog.delete_one(plan.descriptor.model, plan.duplicate.id)
        if deleted != 1:
            # A concurrent merge removed it after we resolved it
            raise MergeFailedError(
                f"{plan.descriptor.kind.value} {plan.duplicate.id} was modified "
                f"concurrently (deleted {deleted} rows)"
            )


async def execute_merge(
    session_factory: async_sessionmaker[AsyncSession],
    kind: DuplicateEntityType | str,
    primary_id: UUID,
    duplicate_id: UUID,
) -> MergeResponse:
    """Convenience wrapper around MergeService.execute_merge()."""
    return await MergeService(session_factory).execute_merge(kind, primary_id, duplicate_id)
