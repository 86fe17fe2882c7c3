"""
Todo API — Storage Handle Tests
=================================

What:  Database.ensure_schema() and TaskRepository against real SQLite files.

What we test:
    ✅ The tasks table is created and can be ensured twice
    ✅ An existing table missing columns, or with a TEXT done column, raises SchemaError
    ✅ An unreachable database raises DatabaseConnectionError
    ✅ Startup (lifespan) fails on either error
    ✅ Repository CRUD primitives
"""

import pytest
from sqlalchemy import text

from todo_api.config import Settings
from todo_api.database import Database
from todo_api.exceptions import DatabaseConnectionError, SchemaError
from todo_api.models.task import Task
from todo_api.repository import TaskRepository


def _sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


class TestEnsureSchema:
    @pytest.mark.asyncio
    async def test_creates_tasks_table(self, tmp_path):
        database = Database(_sqlite_url(tmp_path / "todos.db"))
        try:
            await database.ensure_schema()
            await database.ensure_schema()

            async with database.engine.connect() as conn:
                result = await conn.execute(text("SELECT COUNT(*) FROM tasks"))
                assert result.scalar() == 0
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_incompatible_table_raises_schema_error(self, tmp_path):
        database = Database(_sqlite_url(tmp_path / "todos.db"))
        try:
            async with database.engine.begin() as conn:
                await conn.execute(text("CREATE TABLE tasks (id INTEGER PRIMARY KEY, name TEXT)"))

            with pytest.raises(SchemaError) as exc_info:
                await database.ensure_schema()

            assert exc_info.value.missing_columns == ["description", "done", "title"]
            assert exc_info.value.mismatched_columns == []
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_wrongly_typed_column_raises_schema_error(self, tmp_path):
        database = Database(_sqlite_url(tmp_path / "todos.db"))
        try:
            async with database.engine.begin() as conn:
                await conn.execute(
                    text("CREATE TABLE tasks (id INTEGER PRIMARY KEY, title TEXT, description TEXT, done TEXT)")
                )

            with pytest.raises(SchemaError) as exc_info:
                await database.ensure_schema()

            assert exc_info.value.missing_columns == []
            assert exc_info.value.mismatched_columns == ["done"]
            assert "done" in exc_info.value.message
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_unreachable_database_raises_connection_error(self, tmp_path):
        database = Database(_sqlite_url(tmp_path / "missing-dir" / "todos.db"))
        try:
            with pytest.raises(DatabaseConnectionError):
                await database.ensure_schema()
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_startup_fails_when_database_unreachable(self, tmp_path):
        from todo_api.main import create_app, lifespan

        app = create_app(
            Settings(database_url=_sqlite_url(tmp_path / "missing-dir" / "todos.db"), log_level="WARNING")
        )

        with pytest.raises(DatabaseConnectionError):
            async with lifespan(app):
                pass

    @pytest.mark.asyncio
    async def test_startup_fails_on_incompatible_table(self, tmp_path):
        from todo_api.main import create_app, lifespan

        db_path = tmp_path / "todos.db"
        seed = Database(_sqlite_url(db_path))
        try:
            async with seed.engine.begin() as conn:
                await conn.execute(text("CREATE TABLE tasks (id INTEGER PRIMARY KEY, name TEXT)"))
        finally:
            await seed.dispose()

        app = create_app(Settings(database_url=_sqlite_url(db_path), log_level="WARNING"))

        with pytest.raises(SchemaError):
            async with lifespan(app):
                pass


class TestTaskRepository:
    @pytest.mark.asyncio
    async def test_crud_primitives(self, tmp_path):
        database = Database(_sqlite_url(tmp_path / "todos.db"))
        try:
            await database.ensure_schema()

            async with database.session_factory() as session:
                repo = TaskRepository(session)

                first = await repo.insert(Task(title="one", description="", done=False))
                second = await repo.insert(Task(title="two", description="", done=False))
                assert first.id is not None
                assert second.id > first.id

                assert [task.title for task in await repo.find_all()] == ["one", "two"]

                second.done = True
                await repo.save(second)

            async with database.session_factory() as session:
                repo = TaskRepository(session)

                reloaded = await repo.find_by_id(second.id, for_update=True)
                assert reloaded.done is True

                assert await repo.delete_by_id(first.id) == 1
                assert await repo.delete_by_id(first.id) == 0
                assert await repo.find_by_id(first.id) is None
        finally:
            await database.dispose()
