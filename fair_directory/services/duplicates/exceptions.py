"""Errors raised by duplicate detection and entity merging."""

from __future__ import annotations

from uuid import UUID


class DuplicateError(Exception):
    """Base error for duplicate management operations."""

    pass


class DuplicateValidationError(DuplicateError):
    """Invalid input: unknown entity type, bad threshold, or self-merge."""

    pass


class EntityNotFoundError(DuplicateError):
    """One or both merge targets do not resolve to an existing record."""

    def __init__(self, kind: str, missing_ids: list[UUID]):
        self.kind = kind
        self.missing_ids = missing_ids
        ids = ", ".join(str(i) for i in missing_ids)
        super().__init__(f"{kind} not found: {ids}")


class MergeFailedError(DuplicateError):
    """The merge transaction was aborted; no partial state was committed."""

    pass
