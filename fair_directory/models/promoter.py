"""
Promoter model.

Promoters organize events. A promoter profile may be linked to a user
account; merging promoters never merges the linked accounts.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fair_directory.core.database import Base

if TYPE_CHECKING:
    from fair_directory.models.event import Event
    from fair_directory.models.user import User


class Promoter(Base):
    """
    An event promoter's business profile.

    Attributes:
        user_id: Owning user account, if claimed
        company_name: Business name shown in listings
        slug: URL-safe unique identifier
        verified: Whether an admin has verified the profile
        events: Events organized by this promoter
    """

    __tablename__ = "promoters"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    company_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped[User | None] = relationship("User")
    events: Mapped[list[Event]] = relationship("Event", back_populates="promoter")

    def __repr__(self) -> str:
        return f"<Promoter(id={self.id}, company_name='{self.company_name}')>"
