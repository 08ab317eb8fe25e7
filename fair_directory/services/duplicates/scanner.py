"""
Duplicate scanning over the catalog.

Loads every record of one kind in a stable order (display name, then
id), runs the pair finder over their comparison strings and ranks the
result. Ties in similarity therefore keep a deterministic order across
repeated scans of unchanged data.
"""

from __future__ import annotations

import logging
from typing import Any

from fair_directory.observability import duplicate_pairs_found, duplicate_scans_total, tracer
from fair_directory.repositories.catalog import CatalogRepositoryProtocol
from fair_directory.schemas.duplicates import (
    DuplicateEntityType,
    DuplicatePairResponse,
    FindDuplicatesResponse,
)
from fair_directory.services.duplicates.comparison import (
    comparison_fields,
    comparison_string_builder,
)
from fair_directory.services.duplicates.descriptors import (
    MergeDescriptor,
    get_descriptor,
    to_summary,
)
from fair_directory.services.duplicates.pair_finder import (
    DuplicatePair,
    find_duplicate_pairs,
    rank_pairs,
    validate_threshold,
)
from fair_directory.services.duplicates.preview import dependent_counts
from fair_directory.services.duplicates.similarity import tokenize

logger = logging.getLogger(__name__)


def matched_fields(kind: DuplicateEntityType, entity1: Any, entity2: Any) -> list[str]:
    """
    Salient fields of two records that share at least one token.

    Order follows the kind's comparison field order.
    """
    fields1 = comparison_fields(kind, entity1)
    fields2 = comparison_fields(kind, entity2)
    return [
        label
        for label, value in fields1.items()
        if label in fields2 and tokenize(value) & tokenize(fields2[label])
    ]


class DuplicateScanner:
    """Finds candidate duplicate pairs for one kind at a time."""

    def __init__(self, catalog: CatalogRepositoryProtocol):
        self._catalog = catalog

    async def load_entities(self, descriptor: MergeDescriptor) -> list[Any]:
        model = descriptor.model
        return await self._catalog.find_many(
            model,
            order_by=(getattr(model, descriptor.display_attr), model.id),
            options=descriptor.load_options,
        )

    async def find_duplicates(
        self,
        kind: DuplicateEntityType | str,
        threshold: float,
    ) -> FindDuplicatesResponse:
        """
        Ranked candidate pairs of `kind` with similarity >= threshold.

        Raises:
            DuplicateValidationError: Unknown kind or threshold outside [0, 1]
        """
        descriptor = get_descriptor(kind)
        validate_threshold(threshold)
        entity_type = descriptor.kind.value

        with tracer.start_as_current_span("duplicates.scan") as span:
            span.set_attribute("duplicates.entity_type", entity_type)
            span.set_attribute("duplicates.threshold", threshold)

            entities = await self.load_entities(descriptor)
            pairs: list[DuplicatePair[Any]] = rank_pairs(
                find_duplicate_pairs(
                    entities, comparison_string_builder(descriptor.kind), threshold
                )
            )

            paired_ids = {p.entity1.id for p in pairs} | {p.entity2.id for p in pairs}
            counts = await dependent_counts(self._catalog, descriptor, sorted(paired_ids))

            span.set_attribute("duplicates.entities", len(entities))
            span.set_attribute("duplicates.pairs", len(pairs))

        duplicate_scans_total.labels(entity_type=entity_type).inc()
        duplicate_pairs_found.labels(entity_type=entity_type).observe(len(pairs))
        logger.info(
            "Duplicate scan complete",
            extra={
                "entity_type": entity_type,
                "threshold": threshold,
                "entities": len(entities),
                "pairs": len(pairs),
            },
        )

        return FindDuplicatesResponse(
            type=descriptor.kind,
            threshold=threshold,
            duplicates=[
                DuplicatePairResponse(
                    entity1=to_summary(descriptor, p.entity1, counts[p.entity1.id]),
                    entity2=to_summary(descriptor, p.entity2, counts[p.entity2.id]),
                    similarity=p.similarity,
                    matched_fields=matched_fields(descriptor.kind, p.entity1, p.entity2),
                )
                for p in pairs
            ],
            total_entities=len(entities),
        )


async def find_duplicates(
    catalog: CatalogRepositoryProtocol,
    kind: DuplicateEntityType | str,
    threshold: float,
) -> FindDuplicatesResponse:
    """Convenience wrapper around DuplicateScanner.find_duplicates()."""
    return await DuplicateScanner(catalog).find_duplicates(kind, threshold)
