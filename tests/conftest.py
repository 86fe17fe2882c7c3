"""
Todo API — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the test suite.
How:   Service tests use a mocked AsyncSession; endpoint tests run a real app
       against a throwaway SQLite file through httpx's ASGITransport.

Fixtures:
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── sample_task_data: Field values for a Task row
    ├── test_settings: Settings pointing at tmp_path/todos.db
    ├── test_app: create_app() with the tasks table created
    └── test_client: HTTPX AsyncClient bound to test_app
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before any todo_api import so the module-level settings never point at
# a real PostgreSQL server
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="todo_api_test_"), "todos.db")
)
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.get.return_value = task
        result = await task_service.get_task(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_task_data():
    return {
        "id": 1,
        "title": "Buy milk",
        "description": "2%",
        "done": False,
    }


# ══════════════════════════════════════════════════════════════════════════
# Endpoint-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    from todo_api.config import Settings

    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'todos.db'}",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def test_app(test_settings):
    """
    A fresh application with its own database file.

    ASGITransport does not run the lifespan, so the schema is created here.
    """
    from todo_api.main import create_app

    app = create_app(test_settings)
    await app.state.database.ensure_schema()
    yield app
    await app.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Usage:
        async def test_list(test_client):
            response = await test_client.get("/todos")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
