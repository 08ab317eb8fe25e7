"""
User favorites.

A favorite names its target by (favoritable_type, favoritable_id) with
no database foreign key, so the target's existence is checked here.
FAVORITE_TARGETS maps each discriminant to the model it refers to;
every lookup of a favorite's target goes through it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from fair_directory.core.database import Base
from fair_directory.models import Event, FavoritableType, Promoter, UserFavorite, Vendor, Venue
from fair_directory.repositories.catalog import CatalogRepositoryProtocol
from fair_directory.services.duplicates.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


FAVORITE_TARGETS: dict[FavoritableType, type[Base]] = {
    FavoritableType.VENUE: Venue,
    FavoritableType.EVENT: Event,
    FavoritableType.VENDOR: Vendor,
    FavoritableType.PROMOTER: Promoter,
}


@dataclass(frozen=True)
class FavoriteTarget:
    """A favoritable record: kind discriminant plus id."""

    type: FavoritableType
    id: UUID

    @property
    def model(self) -> type[Base]:
        return FAVORITE_TARGETS[self.type]


class FavoritesService:
    """Reads and toggles a user's favorites."""

    def __init__(self, catalog: CatalogRepositoryProtocol):
        self._catalog = catalog

    async def _find(self, user_id: UUID, target: FavoriteTarget) -> UserFavorite | None:
        favorites = await self._catalog.find_many(
            UserFavorite,
            UserFavorite.user_id == user_id,
            UserFavorite.favoritable_type == target.type,
            UserFavorite.favoritable_id == target.id,
        )
        return favorites[0] if favorites else None

    async def is_favorited(self, user_id: UUID, target: FavoriteTarget) -> bool:
        return await self._find(user_id, target) is not None

    async def get_user_favorite_ids(
        self,
        user_id: UUID,
        favoritable_type: FavoritableType,
    ) -> list[UUID]:
        """Ids of every record of one kind the user has favorited."""
        return await self._catalog.find_values(
            UserFavorite.favoritable_id,
            UserFavorite.user_id == user_id,
            UserFavorite.favoritable_type == favoritable_type,
        )

    async def toggle_favorite(self, user_id: UUID, target: FavoriteTarget) -> bool:
        """
        Add the favorite if absent, remove it if present.

        Returns:
            Whether the target is favorited after the toggle

        Raises:
            EntityNotFoundError: If adding a favorite for a record that does not exist
        """
        existing = await self._find(user_id, target)
        if existing is not None:
            await self._catalog.delete_one(UserFavorite, existing.id)
            logger.info(
                "Favorite removed",
                extra={"user_id": str(user_id), "type": target.type.value, "target_id": str(target.id)},
            )
            return False

        if await self._catalog.find_one(target.model, target.id) is None:
            raise EntityNotFoundError(target.type.value, [target.id])

        await self._catalog.add(
            UserFavorite(
                user_id=user_id,
                favoritable_type=target.type,
                favoritable_id=target.id,
            )
        )
        logger.info(
            "Favorite added",
            extra={"user_id": str(user_id), "type": target.type.value, "target_id": str(target.id)},
        )
        return True
