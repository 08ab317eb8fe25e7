"""
User model.

Users own vendor and promoter profiles and favorite catalog entries.
Account management itself lives in the session layer; this service
only reads users to report ownership differences during merges.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fair_directory.core.database import Base

if TYPE_CHECKING:
    from fair_directory.models.favorite import UserFavorite


class UserRole(str, enum.Enum):
    """Roles assigned to user accounts."""

    USER = "USER"
    PROMOTER = "PROMOTER"
    VENDOR = "VENDOR"
    ADMIN = "ADMIN"


class User(Base):
    """
    A user account.

    Attributes:
        id: UUID primary key (inherited from Base)
        email: Unique login email
        name: Display name
        role: Account role; ADMIN grants access to duplicate management
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            name="user_role",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=UserRole.USER,
    )

    favorites: Mapped[list[UserFavorite]] = relationship(
        "UserFavorite",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role.value})>"
