"""Unit tests for UserRepository."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ferna.db.models.user import AuthProvider
from ferna.db.repositories import UserRepository


class TestUserRepository:
    """Tests for user persistence and the login lookup contract."""

    @pytest.mark.asyncio
    async def test_create(self, async_session: AsyncSession) -> None:
        repo = UserRepository(async_session)

        user = await repo.create(
            email="fern@example.com",
            password_hash="$argon2id$v=19$m=64,t=1,p=1$c2FsdHNhbHRzYWx0$aGFzaGhhc2g",
            full_name="Fern Keeper",
            timezone="Europe/Berlin",
        )

        assert len(user.id) == 36
        assert user.email == "fern@example.com"
        assert user.full_name == "Fern Keeper"
        assert user.timezone == "Europe/Berlin"
        assert user.auth_provider is AuthProvider.local
        assert user.created_at is not None

    @pytest.mark.asyncio
    async def test_get_by_email(self, async_session: AsyncSession) -> None:
        repo = UserRepository(async_session)
        created = await repo.create(email="fern@example.com", password_hash="x")

        found = await repo.get_by_email("fern@example.com")

        assert found is not None
        assert found.id == created.id
        assert await repo.get_by_email("other@example.com") is None

    @pytest.mark.asyncio
    async def test_lookup_by_identifier(self, async_session: AsyncSession) -> None:
        repo = UserRepository(async_session)
        created = await repo.create(email="fern@example.com", password_hash="x")

        assert (await repo.lookup_by_identifier("fern@example.com")).id == created.id
        assert await repo.lookup_by_identifier("nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_email_exists(self, async_session: AsyncSession) -> None:
        repo = UserRepository(async_session)
        await repo.create(email="fern@example.com", password_hash="x")

        assert await repo.email_exists("fern@example.com") is True
        assert await repo.email_exists("cactus@example.com") is False

    @pytest.mark.asyncio
    async def test_email_is_unique(self, async_session: AsyncSession) -> None:
        repo = UserRepository(async_session)
        await repo.create(email="fern@example.com", password_hash="x")

        with pytest.raises(IntegrityError):
            await repo.create(email="fern@example.com", password_hash="y")

    @pytest.mark.asyncio
    async def test_external_provider_without_credential(self, async_session: AsyncSession) -> None:
        repo = UserRepository(async_session)

        user = await repo.create(
            email="fern@example.com",
            password_hash=None,
            auth_provider=AuthProvider.google,
        )

        assert user.password_hash is None
        assert user.auth_provider is AuthProvider.google

    @pytest.mark.asyncio
    async def test_update_password_hash(self, async_session: AsyncSession) -> None:
        repo = UserRepository(async_session)
        user = await repo.create(email="fern@example.com", password_hash="old")

        updated = await repo.update_password_hash(user.id, "new")

        assert updated is not None
        assert updated.password_hash == "new"
        assert await repo.update_password_hash("missing-id", "new") is None
