"""
Duplicate detection and entity merging for the directory catalog.

Pipeline:
1. comparison: project each record to a normalized comparison string
2. similarity: token Jaccard score between two strings
3. pair_finder: all pairs at or above a threshold, ranked
4. preview: read-only plan of what a merge would do
5. merge_service: apply the plan atomically

Example:
    from fair_directory.services.duplicates import DuplicateScanner, MergeService

    report = await DuplicateScanner(catalog).find_duplicates("venues", 0.7)
    pair = report.duplicates[0]
    await MergeService(session_factory).execute_merge(
        "venues", pair.entity1.id, pair.entity2.id
    )
"""

from fair_directory.services.duplicates.comparison import (
    build_comparison_string,
    comparison_fields,
    normalize_for_comparison,
)
from fair_directory.services.duplicates.descriptors import (
    DESCRIPTORS,
    MergeDescriptor,
    get_descriptor,
)
from fair_directory.services.duplicates.exceptions import (
    DuplicateError,
    DuplicateValidationError,
    EntityNotFoundError,
    MergeFailedError,
)
from fair_directory.services.duplicates.merge_service import MergeService, execute_merge
from fair_directory.services.duplicates.pair_finder import (
    DuplicatePair,
    find_duplicate_pairs,
    rank_pairs,
)
from fair_directory.services.duplicates.preview import (
    MergePlan,
    MergePreviewBuilder,
    get_merge_preview,
    plan_merge,
)
from fair_directory.services.duplicates.scanner import DuplicateScanner, find_duplicates
from fair_directory.services.duplicates.similarity import similarity

__all__ = [
    # Comparison
    "build_comparison_string",
    "comparison_fields",
    "normalize_for_comparison",
    # Scoring and pairing
    "similarity",
    "DuplicatePair",
    "find_duplicate_pairs",
    "rank_pairs",
    "DuplicateScanner",
    "find_duplicates",
    # Merging
    "DESCRIPTORS",
    "MergeDescriptor",
    "get_descriptor",
    "MergePlan",
    "MergePreviewBuilder",
    "get_merge_preview",
    "plan_merge",
    "MergeService",
    "execute_merge",
    # Errors
    "DuplicateError",
    "DuplicateValidationError",
    "EntityNotFoundError",
    "MergeFailedError",
]
