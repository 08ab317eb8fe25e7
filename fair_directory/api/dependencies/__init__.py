"""
FastAPI dependency injection modules.

This package contains dependency injection functions for FastAPI routes,
including database session management and authentication.
"""

from fair_directory.api.dependencies.auth import (
    AdminUser,
    CurrentUser,
    get_current_user,
    require_admin,
)
from fair_directory.api.dependencies.database import get_db, get_session_factory

__all__ = [
    "AdminUser",
    "CurrentUser",
    "get_current_user",
    "get_db",
    "get_session_factory",
    "require_admin",
]
