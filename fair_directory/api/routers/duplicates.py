"""
Duplicate management API endpoints.

This router provides administrator-only endpoints for:
- Listing candidate duplicate pairs of one entity kind
- Previewing the consequences of a merge
- Executing a merge

Every route depends on require_admin, which runs before any parameter
is used or any query is issued: callers without a valid administrator
token are rejected with 401/403 regardless of the request's contents.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fair_directory.api.dependencies.auth import AdminUser, require_admin
from fair_directory.api.dependencies.database import get_session_factory
from fair_directory.core.config import settings
from fair_directory.repositories.catalog import CatalogRepo
from fair_directory.schemas.duplicates import (
    DuplicateEntityType,
    FindDuplicatesResponse,
    MergePreviewResponse,
    MergeRequest,
    MergeResponse,
)
from fair_directory.services.duplicates import (
    DuplicateScanner,
    DuplicateValidationError,
    EntityNotFoundError,
    MergeFailedError,
    MergePreviewBuilder,
    MergeService,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/duplicates",
    tags=["duplicates"],
    dependencies=[Depends(require_admin)],
)


# =============================================================================
# Candidate Pairs
# =============================================================================


@router.get(
    "",
    response_model=FindDuplicatesResponse,
    summary="Find duplicate candidates",
    description=(
        "Compare every pair of records of one kind and return those whose "
        "similarity meets the threshold, highest similarity first."
    ),
)
async def find_duplicates(
    catalog: CatalogRepo,
    type: DuplicateEntityType = Query(..., description="Entity kind to scan"),
    threshold: float = Query(
        settings.DUPLICATES_DEFAULT_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Minimum similarity (0-1)",
    ),
) -> FindDuplicatesResponse:
    """Ranked candidate duplicate pairs."""
    try:
        return await DuplicateScanner(catalog).find_duplicates(type, threshold)
    except DuplicateValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


# =============================================================================
# Merge
# =============================================================================


@router.get(
    "/merge-preview",
    response_model=MergePreviewResponse,
    summary="Preview a merge",
    description=(
        "Report the dependent records that merging the duplicate into the "
        "primary would move or discard, with advisory warnings. Read-only."
    ),
)
async def merge_preview(
    catalog: CatalogRepo,
    type: DuplicateEntityType = Query(..., description="Entity kind of both records"),
    primary_id: UUID = Query(..., description="Surviving record"),
    duplicate_id: UUID = Query(..., description="Record to absorb and delete"),
) -> MergePreviewResponse:
    """Merge preview for a pair of records."""
    try:
        return await MergePreviewBuilder(catalog).preview(type, primary_id, duplicate_id)
    except EntityNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except DuplicateValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.post(
    "/merge",
    response_model=MergeResponse,
    summary="Merge duplicate records",
    description=(
        "Atomically move every dependent record of the duplicate to the "
        "primary and delete the duplicate. On failure nothing changes and "
        "the request may be retried."
    ),
)
async def merge_entities(
    request: MergeRequest,
    user: AdminUser,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> MergeResponse:
    """Merge the duplicate into the primary."""
    try:
        result = await MergeService(session_factory).execute_merge(
            request.type, request.primary_id, request.duplicate_id
        )
    except EntityNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except DuplicateValidationError as e:
        logger.warning(
            "Merge validation failed",
            extra={"error": str(e), "user_id": user.user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except MergeFailedError as e:
        logger.error(
            "Merge operation failed",
            extra={"error": str(e), "user_id": user.user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{e}. No changes were made; the merge can be retried.",
        )

    logger.info(
        "Merge executed successfully",
        extra={
            "user_id": user.user_id,
            "entity_type": request.type.value,
            "primary_id": str(request.primary_id),
            "deleted_id": str(result.deleted_id),
        },
    )
    return result
