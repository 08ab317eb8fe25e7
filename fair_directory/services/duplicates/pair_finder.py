"""
Duplicate pair finding.

Compares every unordered pair (i, j), i < j, of a homogeneous entity
collection and keeps those whose comparison strings score at or above
a threshold. Collections are bounded by catalog size (hundreds to low
thousands per kind), so the O(n^2) scan is done directly without
blocking.

Comparison strings are computed once per entity and their token sets
cached for the scan; scoring itself is pure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Sequence, TypeVar

from fair_directory.services.duplicates.exceptions import DuplicateValidationError
from fair_directory.services.duplicates.similarity import jaccard_index, tokenize

logger = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class DuplicatePair(Generic[E]):
    """
    A candidate duplicate pair.

    Attributes:
        entity1: Entity at the lower collection index
        entity2: Entity at the higher collection index
        similarity: Token Jaccard similarity of their comparison strings
        index1: Position of entity1 in the input collection
        index2: Position of entity2 in the input collection
    """

    entity1: E
    entity2: E
    similarity: float
    index1: int = field(compare=False)
    index2: int = field(compare=False)


def validate_threshold(threshold: float) -> float:
    """
    Check that a similarity threshold lies in [0, 1].

    Raises:
        DuplicateValidationError: If threshold is NaN or out of range
    """
    if threshold != threshold or not 0.0 <= threshold <= 1.0:
        raise DuplicateValidationError("Threshold must be between 0 and 1")
    return threshold


def find_duplicate_pairs(
    entities: Sequence[E],
    to_comparison_string: Callable[[E], str],
    threshold: float,
) -> list[DuplicatePair[E]]:
    """
    Find all pairs whose similarity meets the threshold.

    Pairs are emitted in (i, j) collection order. An entity is never
    paired with itself. Callers needing a ranked list should pass the
    result through rank_pairs().

    Args:
        entities: Homogeneous collection of one entity kind
        to_comparison_string: Projection to a normalized comparison string
        threshold: Minimum similarity in [0, 1]; validated by the caller

    Returns:
        List of DuplicatePair with similarity >= threshold
    """
    token_sets = [tokenize(to_comparison_string(entity)) for entity in entities]

    pairs: list[DuplicatePair[E]] = []
    for i in range(len(entities)):
        for j in range(i + 1, len(entities)):
            score = jaccard_index(token_sets[i], token_sets[j])
            if score >= threshold:
                pairs.append(
                    DuplicatePair(
                        entity1=entities[i],
                        entity2=entities[j],
                        similarity=score,
                        index1=i,
                        index2=j,
                    )
                )

    logger.debug(
        "Duplicate pair scan complete",
        extra={
            "entity_count": len(entities),
            "pairs_found": len(pairs),
            "threshold": threshold,
        },
    )
    return pairs


def rank_pairs(pairs: Sequence[DuplicatePair[E]]) -> list[DuplicatePair[E]]:
    """
    Order pairs by similarity, highest first.

    Ties keep collection order of entity1 then entity2, so repeated
    scans of an unchanged data set produce identical output.
    """
    return sorted(pairs, key=lambda p: (-p.similarity, p.index1, p.index2))
