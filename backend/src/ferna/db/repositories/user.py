"""User repository for database operations."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ferna.db.models.user import AuthProvider, User


class UserRepository:
    """Repository for User persistence.

    Also serves as the user store for login orchestration through
    ``lookup_by_identifier``. Emails passed in are expected to be normalized.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by normalized email."""
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lookup_by_identifier(self, identifier: str) -> Optional[User]:
        """Look up the user record for a normalized login identifier."""
        return await self.get_by_email(identifier)

    async def email_exists(self, email: str) -> bool:
        """Check whether an account already uses this email."""
        stmt = select(func.count(User.id)).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def create(
        self,
        email: str,
        password_hash: Optional[str],
        full_name: str = "",
        timezone: str = "UTC",
        auth_provider: AuthProvider = AuthProvider.local,
    ) -> User:
        """Create a new user."""
        user = User(
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            timezone=timezone,
            auth_provider=auth_provider,
        )
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update_password_hash(self, user_id: str, password_hash: str) -> Optional[User]:
        """Replace a user's stored credential."""
        user = await self.get_by_id(user_id)
        if user is None:
            return None

        user.password_hash = password_hash
        await self.session.flush()
        await self.session.refresh(user)
        return user
