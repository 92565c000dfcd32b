"""Repository classes wrapping database access for Ferna models."""

from ferna.db.repositories.user import UserRepository

__all__ = [
    "UserRepository",
]
