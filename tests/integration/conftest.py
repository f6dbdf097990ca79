"""Integration test fixtures backed by PostgreSQL.

These fixtures need the database named by DATABASE_URL with migrations
applied; the tests that use them are skipped when it cannot be reached.
Uses polyfactory for test data generation.
"""

import asyncio
from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from src.app.core import db
from src.app.core.config import get_settings
from src.app.core.db import run_migrations_sync
from src.app.models import Profile
from tests.factories import ProfileFactory, UserFactory, generate_uuid
from tests.utils import cleanup_user_cascade


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Create test database engine and ensure migrations are applied."""
    await db.dispose_engine()

    settings = get_settings()
    test_engine = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        async with test_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError) as e:
        await test_engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {e}")

    await asyncio.to_thread(run_migrations_sync, "head")

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for database operations.

    The session does not auto-commit; tests call `await session.commit()`
    when the repository contract under test depends on it.
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@dataclass
class People:
    client: Profile
    other_client: Profile
    designer: Profile
    manager: Profile

    @property
    def all(self) -> list[Profile]:
        return [self.client, self.other_client, self.designer, self.manager]


@pytest.fixture
async def people(engine: AsyncEngine, db_session: AsyncSession) -> AsyncGenerator[People]:
    """One profile per role plus a second client, each with its user row.

    Names carry a per-test suffix so searches never match other tests' rows.
    """
    suffix = generate_uuid().hex[:8]
    builders = {
        "client": ProfileFactory.client,
        "other_client": ProfileFactory.client,
        "designer": ProfileFactory.designer,
        "manager": ProfileFactory.manager,
    }
    users = {name: UserFactory.build() for name in builders}
    db_session.add_all(users.values())
    await db_session.flush()

    profiles = {
        name: build(id=users[name].id, full_name=f"{name} {suffix}")
        for name, build in builders.items()
    }
    db_session.add_all(profiles.values())
    await db_session.commit()

    yield People(**profiles)

    await db_session.rollback()
    async with engine.connect() as conn:
        for user in users.values():
            await cleanup_user_cascade(conn, user.id)
        await conn.commit()
