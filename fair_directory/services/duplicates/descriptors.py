"""
Per-kind merge descriptors.

The four mergeable kinds differ only in data: which model they map to,
which dependent rows point at them, which counters accumulate, and
which advisory warnings apply. Each kind is described once here and the
preview builder and merge executor interpret the description, so
adding a kind or a dependent relationship is a table edit.

Dependent relationships come in two shapes:
- ForeignKeyTransfer: rows holding a plain foreign key to the entity
  (events of a venue or promoter). Re-pointing cannot collide.
- JoinTransfer: rows of a join table unique on (entity, counterpart)
  (event_vendors). Rows whose counterpart is already linked to the
  primary collide and are discarded instead of re-pointed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import BaseModel
from sqlalchemy.orm import InstrumentedAttribute, selectinload
from sqlalchemy.orm.interfaces import ORMOption

from fair_directory.core.database import Base
from fair_directory.models import (
    Event,
    EventVendor,
    FavoritableType,
    Promoter,
    Vendor,
    Venue,
)
from fair_directory.schemas.duplicates import (
    DuplicateEntityType,
    EventSummary,
    PromoterSummary,
    VendorSummary,
    VenueSummary,
)
from fair_directory.services.duplicates.comparison import resolve_kind


@dataclass(frozen=True)
class ForeignKeyTransfer:
    """Rows of `model` whose `column` references the merged entity."""

    label: str
    model: type[Base]
    column: InstrumentedAttribute[Any]


@dataclass(frozen=True)
class JoinTransfer:
    """
    Join-table rows linking the merged entity to counterparts.

    Attributes:
        label: Key in the relationship counts
        model: Join-table model
        own_column: Column referencing the merged entity
        counterpart_column: Column referencing the other side
        overlap_warning: Warning template, formatted with `count`
    """

    label: str
    model: type[Base]
    own_column: InstrumentedAttribute[Any]
    counterpart_column: InstrumentedAttribute[Any]
    overlap_warning: str


@dataclass(frozen=True)
class ReferenceCheck:
    """Warn when primary and duplicate point at different `relation` records."""

    column: str
    relation: str
    display_attr: str
    plural: str

    def warning(self, primary: Any, duplicate: Any) -> str | None:
        if getattr(primary, self.column) == getattr(duplicate, self.column):
            return None
        primary_name = getattr(getattr(primary, self.relation), self.display_attr)
        duplicate_name = getattr(getattr(duplicate, self.relation), self.display_attr)
        return (
            f'Events have different {self.plural}: "{primary_name}" vs "{duplicate_name}"'
        )


@dataclass(frozen=True)
class DependentCount:
    """Where a summary's dependent count comes from."""

    summary_field: str
    column: InstrumentedAttribute[Any]


@dataclass(frozen=True)
class MergeDescriptor:
    """
    Everything the preview builder and executor need to know about a kind.

    Attributes:
        kind: API kind name
        model: Mapped model of the entity
        favoritable_type: Discriminant used in user_favorites
        display_attr: Attribute used as display name (and scan ordering)
        summary_schema: Response schema for this kind
        dependent_count: Source of the summary's dependent count
        foreign_keys: Plain foreign-key relationships to re-point
        join: Join-table relationship to re-point, if any
        counters: Integer columns summed into the primary
        owner_warning: Warning emitted when user_id differs
        reference_checks: Reference differences worth a warning
        load_options: Loader options needed for comparison and summaries
        summary_extras: Additional summary fields derived from the record
    """

    kind: DuplicateEntityType
    model: type[Base]
    favoritable_type: FavoritableType
    display_attr: str
    summary_schema: type[BaseModel]
    dependent_count: DependentCount
    foreign_keys: tuple[ForeignKeyTransfer, ...] = ()
    join: JoinTransfer | None = None
    counters: tuple[str, ...] = ()
    owner_warning: str | None = None
    reference_checks: tuple[ReferenceCheck, ...] = ()
    load_options: tuple[ORMOption, ...] = ()
    summary_extras: dict[str, Callable[[Any], Any]] = field(default_factory=dict)

    @property
    def transfer_labels(self) -> tuple[str, ...]:
        labels = tuple(transfer.label for transfer in self.foreign_keys)
        if self.join is not None:
            labels += (self.join.label,)
        return labels


def _event_related_name(relation: str, attribute: str) -> Callable[[Any], Any]:
    def getter(event: Event) -> Any:
        target = getattr(event, relation, None)
        return getattr(target, attribute, None) if target is not None else None

    return getter


DESCRIPTORS: dict[DuplicateEntityType, MergeDescriptor] = {
    DuplicateEntityType.VENUES: MergeDescriptor(
        kind=DuplicateEntityType.VENUES,
        model=Venue,
        favoritable_type=FavoritableType.VENUE,
        display_attr="name",
        summary_schema=VenueSummary,
        dependent_count=DependentCount("event_count", Event.venue_id),
        foreign_keys=(ForeignKeyTransfer("events", Event, Event.venue_id),),
    ),
    DuplicateEntityType.PROMOTERS: MergeDescriptor(
        kind=DuplicateEntityType.PROMOTERS,
        model=Promoter,
        favoritable_type=FavoritableType.PROMOTER,
        display_attr="company_name",
        summary_schema=PromoterSummary,
        dependent_count=DependentCount("event_count", Event.promoter_id),
        foreign_keys=(ForeignKeyTransfer("events", Event, Event.promoter_id),),
        owner_warning=(
            "These promoters are linked to different user accounts. Merging will "
            "only transfer events and favorites, not the user account."
        ),
    ),
    DuplicateEntityType.VENDORS: MergeDescriptor(
        kind=DuplicateEntityType.VENDORS,
        model=Vendor,
        favoritable_type=FavoritableType.VENDOR,
        display_attr="business_name",
        summary_schema=VendorSummary,
        dependent_count=DependentCount("event_count", EventVendor.vendor_id),
        join=JoinTransfer(
            label="event_vendors",
            model=EventVendor,
            own_column=EventVendor.vendor_id,
            counterpart_column=EventVendor.event_id,
            overlap_warning=(
                "{count} event(s) have both vendors assigned. "
                "Duplicate assignments will be removed."
            ),
        ),
        owner_warning=(
            "These vendors are linked to different user accounts. Merging will only "
            "transfer event participations and favorites, not the user account."
        ),
    ),
    DuplicateEntityType.EVENTS: MergeDescriptor(
        kind=DuplicateEntityType.EVENTS,
        model=Event,
        favoritable_type=FavoritableType.EVENT,
        display_attr="name",
        summary_schema=EventSummary,
        dependent_count=DependentCount("vendor_count", EventVendor.event_id),
        join=JoinTransfer(
            label="event_vendors",
            model=EventVendor,
            own_column=EventVendor.event_id,
            counterpart_column=EventVendor.vendor_id,
            overlap_warning=(
                "{count} vendor(s) are assigned to both events. "
                "Duplicate assignments will be removed."
            ),
        ),
        counters=("view_count",),
        reference_checks=(
            ReferenceCheck("promoter_id", "promoter", "company_name", "promoters"),
            ReferenceCheck("venue_id", "venue", "name", "venues"),
        ),
        load_options=(selectinload(Event.venue), selectinload(Event.promoter)),
        summary_extras={
            "venue_name": _event_related_name("venue", "name"),
            "promoter_name": _event_related_name("promoter", "company_name"),
        },
    ),
}


def get_descriptor(kind: DuplicateEntityType | str) -> MergeDescriptor:
    """
    Look up the merge descriptor for a kind.

    Raises:
        DuplicateValidationError: If kind is not a mergeable entity type
    """
    return DESCRIPTORS[resolve_kind(kind)]


def to_summary(descriptor: MergeDescriptor, record: Any, dependent_count: int) -> BaseModel:
    """Build the response summary of a record with its dependent count."""
    summary = descriptor.summary_schema.model_validate(record)
    updates: dict[str, Any] = {descriptor.dependent_count.summary_field: dependent_count}
    for name, getter in descriptor.summary_extras.items():
        updates[name] = getter(record)
    return summary.model_copy(update=updates)
