"""FastAPI dependency injection functions.

Provides database sessions, repository instances, and auth collaborators for API endpoints.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ferna.core.auth.credentials import CredentialHasher, get_hasher
from ferna.core.auth.login import LoginOrchestrator
from ferna.core.config import get_settings
from ferna.db.database import get_session
from ferna.db.repositories.user import UserRepository


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session.

    This is the canonical session dependency. All repository factories and
    endpoints should use this instead of importing ``get_session`` directly.
    """
    async for session in get_session():
        yield session


async def get_user_repo(
    session: AsyncSession = Depends(get_db_session),
) -> UserRepository:
    """Get user repository instance."""
    return UserRepository(session)


def get_credential_hasher() -> CredentialHasher:
    """Get the process-wide credential hasher."""
    return get_hasher()


async def get_login_orchestrator(
    repo: UserRepository = Depends(get_user_repo),
    hasher: CredentialHasher = Depends(get_credential_hasher),
) -> LoginOrchestrator:
    """Get a login orchestrator backed by the user repository."""
    return LoginOrchestrator(
        store=repo,
        hasher=hasher,
        lookup_timeout=get_settings().login_lookup_timeout,
    )
