"""User model for authentication.

Users sign up locally with an email and password, or arrive through an
external identity provider, in which case no password credential is stored.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ferna.db.models.base import Base


class AuthProvider(str, enum.Enum):
    """How the user authenticates."""

    local = "local"
    google = "google"
    facebook = "facebook"


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """User account.

    ``email`` is stored normalized (trimmed, lowercase). ``password_hash``
    holds the encoded Argon2id credential for local accounts.
    """

    __tablename__ = "user"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_user_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), default="UTC", nullable=False)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    auth_provider: Mapped[AuthProvider] = mapped_column(
        Enum(AuthProvider), default=AuthProvider.local, nullable=False
    )
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', provider={self.auth_provider.value})>"
