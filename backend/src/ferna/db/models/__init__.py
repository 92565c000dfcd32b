"""SQLAlchemy ORM models for the Ferna database schema."""

from ferna.db.models.base import Base
from ferna.db.models.user import AuthProvider, User

__all__ = [
    # Base
    "Base",
    # Models
    "User",
    # Enums
    "AuthProvider",
]
