"""
Event and event participation models.

Events are hosted at a venue and organized by a promoter. Vendors join
events through EventVendor, which is unique on (event_id, vendor_id):
an event may not list the same vendor twice.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fair_directory.core.database import Base

if TYPE_CHECKING:
    from fair_directory.models.promoter import Promoter
    from fair_directory.models.vendor import Vendor
    from fair_directory.models.venue import Venue


class Event(Base):
    """
    A scheduled event.

    Attributes:
        name: Display name
        description: Long-form description
        venue_id: Hosting venue (required)
        promoter_id: Organizing promoter (required)
        start_date, end_date: Schedule
        ticket_price_min, ticket_price_max: Price range
        view_count: Monotonically increasing page view counter
        event_vendors: Vendor participation rows
    """

    __tablename__ = "events"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    venue_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("venues.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    promoter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("promoters.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ticket_price_min: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    ticket_price_max: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="APPROVED")
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    venue: Mapped[Venue] = relationship("Venue", back_populates="events")
    promoter: Mapped[Promoter] = relationship("Promoter", back_populates="events")
    event_vendors: Mapped[list[EventVendor]] = relationship(
        "EventVendor",
        back_populates="event",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name='{self.name}')>"


class EventVendor(Base):
    """
    Participation of a vendor in an event.

    Attributes:
        event_id: The event
        vendor_id: The participating vendor
        booth_info: Optional booth assignment notes
        status: Participation status (PENDING, APPROVED, REJECTED)
    """

    __tablename__ = "event_vendors"
    __table_args__ = (
        UniqueConstraint("event_id", "vendor_id", name="uq_event_vendors_event_vendor"),
    )

    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    booth_info: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="APPROVED")

    event: Mapped[Event] = relationship("Event", back_populates="event_vendors")
    vendor: Mapped[Vendor] = relationship("Vendor", back_populates="event_vendors")

    def __repr__(self) -> str:
        return f"<EventVendor(event_id={self.event_id}, vendor_id={self.vendor_id})>"
