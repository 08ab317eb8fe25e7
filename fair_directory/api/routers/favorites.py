"""
Favorites API endpoints.

Signed-in users list and toggle their favorite venues, events, vendors
and promoters.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from fair_directory.api.dependencies.auth import CurrentUser
from fair_directory.models import FavoritableType
from fair_directory.repositories.catalog import CatalogRepo
from fair_directory.schemas.auth import AuthenticatedUser
from fair_directory.schemas.favorites import (
    FavoriteIdsResponse,
    ToggleFavoriteRequest,
    ToggleFavoriteResponse,
)
from fair_directory.services.duplicates.exceptions import EntityNotFoundError
from fair_directory.services.favorites import FavoritesService, FavoriteTarget

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _user_uuid(user: AuthenticatedUser) -> UUID:
    """Token subjects are user UUIDs; anything else is an invalid token."""
    try:
        return UUID(user.user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "invalid_token",
                "error_description": "Token subject is not a user id",
            },
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.get(
    "",
    response_model=FavoriteIdsResponse,
    summary="List favorite ids",
    description="Ids of every record of one kind the caller has favorited.",
)
async def list_favorites(
    user: CurrentUser,
    catalog: CatalogRepo,
    type: FavoritableType = Query(..., description="Kind of favorite"),
) -> FavoriteIdsResponse:
    ids = await FavoritesService(catalog).get_user_favorite_ids(_user_uuid(user), type)
    return FavoriteIdsResponse(type=type, ids=ids)


@router.post(
    "/toggle",
    response_model=ToggleFavoriteResponse,
    summary="Toggle a favorite",
    description="Favorite the record if it is not yet a favorite, otherwise remove it.",
)
async def toggle_favorite(
    request: ToggleFavoriteRequest,
    user: CurrentUser,
    catalog: CatalogRepo,
) -> ToggleFavoriteResponse:
    try:
        is_favorited = await FavoritesService(catalog).toggle_favorite(
            _user_uuid(user), FavoriteTarget(type=request.type, id=request.id)
        )
    except EntityNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    return ToggleFavoriteResponse(is_favorited=is_favorited)
