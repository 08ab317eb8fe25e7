"""
Vendor model.

Vendors participate in events through EventVendor rows. Like promoters,
a vendor profile may be claimed by a user account.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fair_directory.core.database import Base

if TYPE_CHECKING:
    from fair_directory.models.event import EventVendor
    from fair_directory.models.user import User


class Vendor(Base):
    """
    A vendor's business profile.

    Attributes:
        user_id: Owning user account, if claimed
        business_name: Business name shown in listings
        vendor_type: Free-form category (e.g., 'Arts & Crafts')
        event_vendors: Participation rows linking this vendor to events
    """

    __tablename__ = "vendors"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    business_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    vendor_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped[User | None] = relationship("User")
    event_vendors: Mapped[list[EventVendor]] = relationship(
        "EventVendor",
        back_populates="vendor",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, business_name='{self.business_name}')>"
