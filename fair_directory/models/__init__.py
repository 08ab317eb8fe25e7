"""
Database models.

This module exports all database models for easy import throughout the
application. All models inherit from Base and include common audit columns
(id, created_at, updated_at).

Models:
    - User: User account with a role
    - UserRole: Enum of account roles
    - Venue: Physical location hosting events
    - Promoter: Event organizer profile
    - Vendor: Vendor business profile
    - Event: Scheduled event at a venue, organized by a promoter
    - EventVendor: Vendor participation in an event
    - UserFavorite: Polymorphic favorite of a catalog entry
    - FavoritableType: Enum of favoritable kinds
"""

from fair_directory.models.event import Event, EventVendor
from fair_directory.models.favorite import FavoritableType, UserFavorite
from fair_directory.models.promoter import Promoter
from fair_directory.models.user import User, UserRole
from fair_directory.models.vendor import Vendor
from fair_directory.models.venue import Venue

__all__ = [
    "Event",
    "EventVendor",
    "FavoritableType",
    "Promoter",
    "User",
    "UserFavorite",
    "UserRole",
    "Vendor",
    "Venue",
]
