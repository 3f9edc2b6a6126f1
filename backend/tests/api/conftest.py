"""API test fixtures — FastAPI test client over the in-memory SQLite database.

Invariants:
    - get_db dependency overridden to use the test session factory
    - db_manager patched: the engagement store and observers open their own sessions
    - Dependency overrides cleared after every test

Design Decisions:
    - Background tasks run before the httpx response returns, so tests can assert
      on notifications written by observers right after a toggle
"""

import pytest
from httpx import ASGITransport, AsyncClient

import app.infrastructure.database as db_module
from app.infrastructure.database import get_db
from app.main import app
from app.models.project import Project


@pytest.fixture
async def client(test_session_factory, test_db_manager):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    db_module.db_manager = test_db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_project(test_db):
    """A project owned by 'owner' with no likes yet."""
    project = Project(
        owner_id="owner",
        title="Suspension bridge model",
        category="architecture",
        thumbnail="https://img.example/bridge-1.webp",
        images=["https://img.example/bridge-1.webp", "https://img.example/bridge-2.webp"],
    )
    test_db.add(project)
    await test_db.commit()
    await test_db.refresh(project)
    return project
