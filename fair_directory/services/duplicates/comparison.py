"""
Comparison strings for duplicate detection.

Each mergeable kind projects its salient fields into one normalized
string. Every field passes through the same normalizer, so two records
that differ only in case, accents, punctuation or spacing produce the
same string.

Salient fields, in order:
- Venue: name, address, city, state
- Event: name, description prefix, venue name, promoter company name
- Vendor: business name, vendor type
- Promoter: company name
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Callable

from fair_directory.core.config import settings
from fair_directory.schemas.duplicates import DuplicateEntityType
from fair_directory.services.duplicates.exceptions import DuplicateValidationError

_PUNCTUATION = re.compile(r"[^\w\s]|_")


def normalize_for_comparison(text: str | None) -> str:
    """
    Normalize text for similarity comparison.

    Applies:
    - Lowercase conversion
    - Unicode normalization (NFKD) and diacritic removal
    - Punctuation removal
    - Whitespace collapse and trim

    Args:
        text: Text to normalize (None is treated as empty)

    Returns:
        Normalized text string
    """
    if not text:
        return ""

    normalized = text.lower()

    normalized = unicodedata.normalize("NFKD", normalized)
    normalized = "".join(c for c in normalized if not unicodedata.combining(c))

    normalized = _PUNCTUATION.sub("", normalized)

    return " ".join(normalized.split())


def resolve_kind(kind: DuplicateEntityType | str) -> DuplicateEntityType:
    """Coerce an API kind name to DuplicateEntityType."""
    try:
        return DuplicateEntityType(kind)
    except ValueError as e:
        raise DuplicateValidationError(f"Unknown entity type: {kind}") from e


def _related(record: Any, relation: str, attribute: str) -> str | None:
    target = getattr(record, relation, None)
    if target is None:
        return None
    return getattr(target, attribute, None)


def _description_prefix(record: Any) -> str | None:
    description = getattr(record, "description", None)
    if not description:
        return None
    return description[: settings.DUPLICATES_DESCRIPTION_CHARS]


FieldGetter = Callable[[Any], "str | None"]

# Ordered (field label, getter) pairs per kind
COMPARISON_FIELDS: dict[DuplicateEntityType, tuple[tuple[str, FieldGetter], ...]] = {
    DuplicateEntityType.VENUES: (
        ("name", lambda r: r.name),
        ("address", lambda r: r.address),
        ("city", lambda r: r.city),
        ("state", lambda r: r.state),
    ),
    DuplicateEntityType.EVENTS: (
        ("name", lambda r: r.name),
        ("description", _description_prefix),
        ("venue", lambda r: _related(r, "venue", "name")),
        ("promoter", lambda r: _related(r, "promoter", "company_name")),
    ),
    DuplicateEntityType.VENDORS: (
        ("business_name", lambda r: r.business_name),
        ("vendor_type", lambda r: r.vendor_type),
    ),
    DuplicateEntityType.PROMOTERS: (
        ("company_name", lambda r: r.company_name),
    ),
}


def comparison_fields(kind: DuplicateEntityType | str, record: Any) -> dict[str, str]:
    """
    Normalized salient fields of a record, keyed by field label.

    Empty fields are omitted. Insertion order follows COMPARISON_FIELDS.

    Raises:
        DuplicateValidationError: If kind is not a mergeable entity type
    """
    fields = COMPARISON_FIELDS[resolve_kind(kind)]
    projected: dict[str, str] = {}
    for label, getter in fields:
        value = normalize_for_comparison(getter(record))
        if value:
            projected[label] = value
    return projected


def build_comparison_string(kind: DuplicateEntityType | str, record: Any) -> str:
    """
    Build the comparison string for a record of the given kind.

    Pure and stable: the same record always yields the same string.

    Example:
        >>> build_comparison_string("promoters", promoter)
        'fair events co'
    """
    return " ".join(comparison_fields(kind, record).values())


def comparison_string_builder(kind: DuplicateEntityType | str) -> Callable[[Any], str]:
    """Bind build_comparison_string to one kind, for use with the pair finder."""
    resolved = resolve_kind(kind)
    return lambda record: build_comparison_string(resolved, record)
