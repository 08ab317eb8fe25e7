"""
Merge preview.

Computes, without mutating anything, what merging a duplicate into a
primary record would do: how many dependent rows move, which rows are
discarded because they collide with rows already on the primary, and
which advisory warnings apply.

The same computation is the first step of every merge: the executor
calls plan_merge() inside its transaction so the work it performs is
derived from current data, never from a stale preview.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from fair_directory.models import UserFavorite
from fair_directory.observability import tracer
from fair_directory.repositories.catalog import CatalogRepositoryProtocol
from fair_directory.schemas.duplicates import (
    DuplicateEntityType,
    MergePreviewResponse,
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
)

logger = logging.getLogger(__name__)


@dataclass
class MergePlan:
    """
    Resolved merge targets and the dependent-row work a merge implies.

    Attributes:
        descriptor: Descriptor of the entity kind
        primary: Surviving record
        duplicate: Record to absorb and delete
        transfers: Rows to re-point per relationship label
        overlapping_counterparts: Join-table counterparts linked to both records
        colliding_favorite_users: Users who favorite both records
        favorites: Favorites to re-point (collisions excluded)
        warnings: Advisory, non-blocking warnings
    """

    descriptor: MergeDescriptor
    primary: Any
    duplicate: Any
    transfers: dict[str, int] = field(default_factory=dict)
    overlapping_counterparts: list[Any] = field(default_factory=list)
    colliding_favorite_users: list[UUID] = field(default_factory=list)
    favorites: int = 0
    warnings: list[str] = field(default_factory=list)

    def relationship_counts(self) -> RelationshipCounts:
        return RelationshipCounts(**self.transfers, favorites=self.favorites)


def _favorite_filter(descriptor: MergeDescriptor, entity_id: UUID) -> tuple[Any, Any]:
    return (
        UserFavorite.favoritable_type == descriptor.favoritable_type,
        UserFavorite.favoritable_id == entity_id,
    )


async def load_merge_targets(
    catalog: CatalogRepositoryProtocol,
    descriptor: MergeDescriptor,
    primary_id: UUID,
    duplicate_id: UUID,
) -> tuple[Any, Any]:
    """
    Resolve both merge targets.

    Raises:
        DuplicateValidationError: If primary_id equals duplicate_id
        EntityNotFoundError: If either id does not resolve
    """
    if primary_id == duplicate_id:
        raise DuplicateValidationError("Cannot merge an entity with itself")

    primary = await catalog.find_one(
        descriptor.model, primary_id, options=descriptor.load_options
    )
    duplicate = await catalog.find_one(
        descriptor.model, duplicate_id, options=descriptor.load_options
    )

    missing = [
        entity_id
        for entity_id, record in ((primary_id, primary), (duplicate_id, duplicate))
        if record is None
    ]
    if missing:
        logger.warning(
            "Merge target not found",
            extra={
                "entity_type": descriptor.kind.value,
                "missing_ids": [str(i) for i in missing],
            },
        )
        raise EntityNotFoundError(descriptor.kind.value, missing)

    return primary, duplicate


async def plan_merge(
    catalog: CatalogRepositoryProtocol,
    descriptor: MergeDescriptor,
    primary_id: UUID,
    duplicate_id: UUID,
) -> MergePlan:
    """
    Work out what merging duplicate_id into primary_id involves.

    Read-only. Counts exclude rows that will be discarded rather than
    re-pointed, so they equal what a merge would report right now.

    Raises:
        DuplicateValidationError: If primary_id equals duplicate_id
        EntityNotFoundError: If either id does not resolve
    """
    primary, duplicate = await load_merge_targets(
        catalog, descriptor, primary_id, duplicate_id
    )
    plan = MergePlan(descriptor=descriptor, primary=primary, duplicate=duplicate)

    if descriptor.owner_warning and primary.user_id != duplicate.user_id:
        plan.warnings.append(descriptor.owner_warning)

    for check in descriptor.reference_checks:
        warning = check.warning(primary, duplicate)
        if warning:
            plan.warnings.append(warning)

    for transfer in descriptor.foreign_keys:
        plan.transfers[transfer.label] = await catalog.count(
            transfer.model, transfer.column == duplicate_id
        )

    join = descriptor.join
    if join is not None:
        duplicate_links = await catalog.find_values(
            join.counterpart_column, join.own_column == duplicate_id
        )
        primary_links = set(
            await catalog.find_values(join.counterpart_column, join.own_column == primary_id)
        )
        plan.overlapping_counterparts = [c for c in duplicate_links if c in primary_links]
        plan.transfers[join.label] = len(duplicate_links) - len(plan.overlapping_counterparts)
        if plan.overlapping_counterparts:
            plan.warnings.append(
                join.overlap_warning.format(count=len(plan.overlapping_counterparts))
            )

    duplicate_fans = await catalog.find_values(
        UserFavorite.user_id, *_favorite_filter(descriptor, duplicate_id)
    )
    primary_fans = set(
        await catalog.find_values(UserFavorite.user_id, *_favorite_filter(descriptor, primary_id))
    )
    plan.colliding_favorite_users = [u for u in duplicate_fans if u in primary_fans]
    plan.favorites = len(duplicate_fans) - len(plan.colliding_favorite_users)

    return plan


async def dependent_counts(
    catalog: CatalogRepositoryProtocol,
    descriptor: MergeDescriptor,
    entity_ids: list[UUID],
) -> dict[UUID, int]:
    """Dependent count per entity id for summaries (0 when none)."""
    counts = await catalog.count_by(descriptor.dependent_count.column, entity_ids)
    return {entity_id: counts.get(entity_id, 0) for entity_id in entity_ids}


class MergePreviewBuilder:
    """
    Builds merge previews over a catalog repository.

    Example:
        builder = MergePreviewBuilder(CatalogRepository(session))
        preview = await builder.preview("vendors", primary_id, duplicate_id)
        if preview.warnings:
            ...
    """

    def __init__(self, catalog: CatalogRepositoryProtocol):
        self._catalog = catalog

    async def preview(
        self,
        kind: DuplicateEntityType | str,
        primary_id: UUID,
        duplicate_id: UUID,
    ) -> MergePreviewResponse:
        """
        Preview merging duplicate_id into primary_id.

        Raises:
            DuplicateValidationError: Unknown kind or identical ids
            EntityNotFoundError: Either id does not resolve
        """
        descriptor = get_descriptor(kind)

        with tracer.start_as_current_span("duplicates.merge_preview") as span:
            span.set_attribute("duplicates.entity_type", descriptor.kind.value)

            plan = await plan_merge(self._catalog, descriptor, primary_id, duplicate_id)
            counts = await dependent_counts(
                self._catalog, descriptor, [primary_id, duplicate_id]
            )

        logger.info(
            "Merge preview built",
            extra={
                "entity_type": descriptor.kind.value,
                "primary_id": str(primary_id),
                "duplicate_id": str(duplicate_id),
                "transfers": plan.transfers,
                "favorites": plan.favorites,
                "warnings": len(plan.warnings),
            },
        )

        return MergePreviewResponse(
            type=descriptor.kind,
            primary=to_summary(descriptor, plan.primary, counts[primary_id]),
            duplicate=to_summary(descriptor, plan.duplicate, counts[duplicate_id]),
            relationships_to_transfer=plan.relationship_counts(),
            overlap_conflicts=len(plan.overlapping_counterparts),
            favorite_collisions=len(plan.colliding_favorite_users),
            warnings=plan.warnings,
            can_merge=True,
        )


async def get_merge_preview(
    catalog: CatalogRepositoryProtocol,
    kind: DuplicateEntityType | str,
    primary_id: UUID,
    duplicate_id: UUID,
) -> MergePreviewResponse:
    """Convenience wrapper around MergePreviewBuilder.preview()."""
    return await MergePreviewBuilder(catalog).preview(kind, primary_id, duplicate_id)
