"""Database module for Ferna."""

from ferna.db.database import (
    DatabaseConfig,
    get_database,
    get_session,
    set_database,
)
from ferna.db.models import AuthProvider, Base, User
from ferna.db.repositories import UserRepository

__all__ = [
    # Database configuration
    "DatabaseConfig",
    "get_database",
    "set_database",
    "get_session",
    # Models
    "Base",
    "User",
    "AuthProvider",
    # Repositories
    "UserRepository",
]
