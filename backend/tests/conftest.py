"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Env vars set before any app module is imported (get_settings is cached)
    - Every test gets a fresh in-memory SQLite database; concurrency tests use
      file_db_manager (a file per test) so sessions hold separate connections
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-for-portfolio-engagement-suite")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

from app.db.base import Base  # noqa: E402
import app.models  # noqa: E402,F401
from app.infrastructure.database import DatabaseSessionManager  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def test_db_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the in-memory test engine."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
async def file_db_manager(tmp_path):
    """File-backed SQLite so concurrent sessions get separate pooled connections."""
    manager = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'engagement.db'}",
    )
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()
