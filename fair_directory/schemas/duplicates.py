"""
Duplicate management API request/response schemas.

This module defines Pydantic models for the duplicate detection and
merge endpoints: candidate pair listings, merge previews and merge
results, plus the per-kind entity summaries embedded in them.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# Enums
# =============================================================================


class DuplicateEntityType(str, Enum):
    """Mergeable entity kinds, as named in the API."""

    VENUES = "venues"
    EVENTS = "events"
    VENDORS = "vendors"
    PROMOTERS = "promoters"


# =============================================================================
# Entity Summary Schemas (for embedding in responses)
# =============================================================================


class VenueSummary(BaseModel):
    """Venue fields shown when comparing duplicates."""

    model_config = ConfigDict(from_attributes=True)

    kind: Literal["venue"] = "venue"
    id: UUID
    name: str
    slug: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    capacity: Optional[int] = None
    status: str
    created_at: datetime
    event_count: int = Field(0, description="Events hosted at this venue")


class PromoterSummary(BaseModel):
    """Promoter fields shown when comparing duplicates."""

    model_config = ConfigDict(from_attributes=True)

    kind: Literal["promoter"] = "promoter"
    id: UUID
    user_id: Optional[UUID] = None
    company_name: str
    slug: str
    description: Optional[str] = None
    website: Optional[str] = None
    verified: bool
    created_at: datetime
    event_count: int = Field(0, description="Events organized by this promoter")


class VendorSummary(BaseModel):
    """Vendor fields shown when comparing duplicates."""

    model_config = ConfigDict(from_attributes=True)

    kind: Literal["vendor"] = "vendor"
    id: UUID
    user_id: Optional[UUID] = None
    business_name: str
    slug: str
    description: Optional[str] = None
    vendor_type: Optional[str] = None
    website: Optional[str] = None
    verified: bool
    created_at: datetime
    event_count: int = Field(0, description="Events this vendor participates in")


class EventSummary(BaseModel):
    """Event fields shown when comparing duplicates."""

    model_config = ConfigDict(from_attributes=True)

    kind: Literal["event"] = "event"
    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    venue_id: UUID
    promoter_id: UUID
    venue_name: Optional[str] = None
    promoter_name: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    ticket_price_min: Optional[Decimal] = None
    ticket_price_max: Optional[Decimal] = None
    status: str
    view_count: int
    created_at: datetime
    vendor_count: int = Field(0, description="Vendors participating in this event")


EntitySummary = Annotated[
    Union[VenueSummary, EventSummary, VendorSummary, PromoterSummary],
    Field(discriminator="kind"),
]


# =============================================================================
# Candidate Pair Schemas
# =============================================================================


class DuplicatePairResponse(BaseModel):
    """A candidate duplicate pair with its similarity score."""

    entity1: EntitySummary = Field(description="Earlier entity in collection order")
    entity2: EntitySummary = Field(description="Later entity in collection order")
    similarity: float = Field(ge=0.0, le=1.0, description="Token Jaccard similarity")
    matched_fields: list[str] = Field(
        default_factory=list,
        description="Salient fields that share at least one token",
    )


class FindDuplicatesResponse(BaseModel):
    """Ranked candidate pairs for one entity kind."""

    type: DuplicateEntityType
    threshold: float = Field(ge=0.0, le=1.0)
    duplicates: list[DuplicatePairResponse] = Field(default_factory=list)
    total_entities: int = Field(description="Number of entities that were compared")


# =============================================================================
# Merge Schemas
# =============================================================================


class RelationshipCounts(BaseModel):
    """Dependent records moved (or to be moved) from duplicate to primary."""

    events: Optional[int] = Field(None, description="Events re-pointed (venues, promoters)")
    event_vendors: Optional[int] = Field(
        None, description="Participation rows re-pointed (vendors, events)"
    )
    favorites: int = Field(0, description="Favorites re-pointed")


class MergePreviewResponse(BaseModel):
    """Consequences of merging duplicate into primary."""

    type: DuplicateEntityType
    primary: EntitySummary
    duplicate: EntitySummary
    relationships_to_transfer: RelationshipCounts
    overlap_conflicts: int = Field(
        0, description="Participation rows linked to both records that will be discarded"
    )
    favorite_collisions: int = Field(
        0, description="Favorites dropped because the user already favorites the primary"
    )
    warnings: list[str] = Field(default_factory=list)
    can_merge: bool = True


class MergeRequest(BaseModel):
    """Request to merge a duplicate into a primary record."""

    type: DuplicateEntityType
    primary_id: UUID = Field(description="Surviving record")
    duplicate_id: UUID = Field(description="Record to absorb and delete")

    @model_validator(mode="after")
    def check_distinct_ids(self) -> MergeRequest:
        """A record cannot be merged into itself."""
        if self.primary_id == self.duplicate_id:
            raise ValueError("primary_id and duplicate_id must differ")
        return self


class MergeResponse(BaseModel):
    """Result of a completed merge."""

    success: bool = True
    type: DuplicateEntityType
    merged_entity: EntitySummary
    transferred_relationships: RelationshipCounts
    deleted_id: UUID = Field(description="ID of the deleted duplicate")
