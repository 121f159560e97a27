"""Integration test fixtures.

These fixtures require a PostgreSQL database at DATABASE_URL. Migrations are
applied once per session; each test works in its own random tenant so runs
never see each other's rows.
"""

from collections.abc import AsyncGenerator

import pytest
from alembic.config import Config
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from alembic import command
from src.safeops.core.config import get_settings


def _upgrade_head() -> None:
    command.upgrade(Config("alembic.ini"), "head")


@pytest.fixture(scope="session")
def migrated() -> None:
    _upgrade_head()


@pytest.fixture
async def engine(migrated: None) -> AsyncGenerator[AsyncEngine]:
    test_engine = create_async_engine(get_settings().database_url, poolclass=NullPool)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Async session; tests commit explicitly."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def other_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Second connection, for racing writers."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session
