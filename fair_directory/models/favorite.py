"""
User favorite model.

Favorites are a polymorphic association: (favoritable_type,
favoritable_id) names a venue, event, vendor or promoter without a
database foreign key to the target table. The target is resolved in
the application layer (see fair_directory.services.favorites).
"""

from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fair_directory.core.database import Base

if TYPE_CHECKING:
    from fair_directory.models.user import User


class FavoritableType(str, enum.Enum):
    """Kinds of catalog entries a user can favorite."""

    VENUE = "venue"
    EVENT = "event"
    VENDOR = "vendor"
    PROMOTER = "promoter"


class UserFavorite(Base):
    """
    A user's favorite catalog entry.

    Unique on (user_id, favoritable_type, favoritable_id): a user may
    favorite a given entry at most once.
    """

    __tablename__ = "user_favorites"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "favoritable_type",
            "favoritable_id",
            name="uq_user_favorites_user_target",
        ),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    favoritable_type: Mapped[FavoritableType] = mapped_column(
        SQLEnum(
            FavoritableType,
            name="favoritable_type",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
    )
    favoritable_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    user: Mapped[User] = relationship("User", back_populates="favorites")

    def __repr__(self) -> str:
        return (
            f"<UserFavorite(user_id={self.user_id}, "
            f"{self.favoritable_type.value}={self.favoritable_id})>"
        )
