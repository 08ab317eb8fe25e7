"""Favorite API request/response schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from fair_directory.models.favorite import FavoritableType


class ToggleFavoriteRequest(BaseModel):
    """Toggle the caller's favorite on one catalog entry."""

    type: FavoritableType
    id: UUID = Field(description="ID of the venue, event, vendor or promoter")


class ToggleFavoriteResponse(BaseModel):
    """Favorite state after a toggle."""

    is_favorited: bool


class FavoriteIdsResponse(BaseModel):
    """IDs of the caller's favorites of one kind."""

    type: FavoritableType
    ids: list[UUID] = Field(default_factory=list)
