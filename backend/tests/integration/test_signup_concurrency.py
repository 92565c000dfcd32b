"""Integration tests for concurrent signups against a file-backed database.

Each request gets its own session from the global DatabaseConfig, so
duplicate signups race on the unique email constraint.
"""

import asyncio

import pytest
import pytest_asyncio
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient

from ferna.api.deps import get_credential_hasher
from ferna.api.v1.auth import router as auth_router
from ferna.db import database
from ferna.db.database import DatabaseConfig, get_database, set_database
from ferna.db.repositories.user import UserRepository


@pytest_asyncio.fixture
async def file_database(tmp_path):
    """Install a file-backed SQLite database as the global database."""
    previous = database._db_config
    db = DatabaseConfig(database_url=f"sqlite+aiosqlite:///{tmp_path / 'ferna.db'}")
    await db.create_tables()
    set_database(db)

    yield db

    await db.dispose()
    set_database(previous)


@pytest_asyncio.fixture
async def client(file_database, fast_hasher):
    """Client for an app using real per-request sessions."""
    app = FastAPI()
    app.include_router(auth_router)
    app.dependency_overrides[get_credential_hasher] = lambda: fast_hasher

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


class TestConcurrentSignup:
    """Tests for duplicate signups racing each other."""

    @pytest.mark.asyncio
    async def test_set_database_is_used(self, file_database):
        assert get_database() is file_database

    @pytest.mark.asyncio
    async def test_duplicate_signups_conflict(self, client, file_database):
        responses = await asyncio.gather(
            *(
                client.post(
                    "/api/v1/auth/signup",
                    json={"email": "a@b.co", "password": f"password-{i}"},
                )
                for i in range(4)
            )
        )

        statuses = sorted(r.status_code for r in responses)
        assert statuses == [
            status.HTTP_201_CREATED,
            status.HTTP_409_CONFLICT,
            status.HTTP_409_CONFLICT,
            status.HTTP_409_CONFLICT,
        ]
        for r in responses:
            if r.status_code == status.HTTP_409_CONFLICT:
                assert r.json() == {"detail": "Email already registered"}

        async with file_database.session() as session:
            user = await UserRepository(session).get_by_email("a@b.co")
            assert user is not None
            created = next(r for r in responses if r.status_code == status.HTTP_201_CREATED)
            assert user.id == created.json()["user_id"]
