"""
Venue model.

A venue is a physical location that hosts events. Events reference
their venue by foreign key; a venue cannot be deleted while events
still point at it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fair_directory.core.database import Base

if TYPE_CHECKING:
    from fair_directory.models.event import Event


class Venue(Base):
    """
    A venue in the directory.

    Attributes:
        name: Display name (e.g., 'County Fairgrounds')
        slug: URL-safe unique identifier
        address, city, state, zip: Postal address
        latitude, longitude: Geo coordinates
        capacity: Maximum attendance
        status: Listing status (ACTIVE, INACTIVE)
        events: Events hosted at this venue
    """

    __tablename__ = "venues"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    state: Mapped[str | None] = mapped_column(String(64), nullable=True)
    zip: Mapped[str | None] = mapped_column(String(20), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")

    events: Mapped[list[Event]] = relationship("Event", back_populates="venue")

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name='{self.name}')>"
