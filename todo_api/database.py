"""
Todo API — Database Session Management
========================================

What:  The storage handle: async SQLAlchemy engine, session factory, schema
       bootstrap and the per-request FastAPI session dependency.
How:   create_app() builds one Database from Settings and stores it on
       app.state; get_db_session() pulls it from there for each request.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from Settings and only apply
    to PostgreSQL. pool_recycle=3600 recycles connections hourly.
"""

import logging
from typing import AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import inspect, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from todo_api.exceptions import DatabaseConnectionError, SchemaError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def _python_type(column_type) -> Optional[type]:
    try:
        return column_type.python_type
    except NotImplementedError:
        return None


def _existing_columns(sync_conn, table_name: str) -> Dict[str, Optional[type]]:
    """Column name → Python type of the reflected column (None if unknown)."""
    return {
        column["name"]: _python_type(column["type"])
        for column in inspect(sync_conn).get_columns(table_name)
    }


class Database:
    """
    Wraps the async engine and session factory for one application instance.

    Creating a Database does not open a connection; the first round trip
    happens in ensure_schema() during application startup.
    """

    def __init__(self, url: URL | str, echo: bool = False, **engine_options):
        self.url = url
        self.engine = create_async_engine(url, echo=echo, **engine_options)
        # expire_on_commit=False keeps attributes readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def ensure_schema(self) -> None:
        """
        Create the tasks table if absent and check an existing one.

        Raises:
            DatabaseConnectionError: The database could not be reached
            SchemaError: The table exists but lacks required columns or
                declares one with an incompatible type
        """
        # Imported here so the model registers with Base.metadata
        from todo_api.models.task import Task

        try:
            await self.ping()
        except (DBAPIError, OSError) as e:
            raise DatabaseConnectionError(
                message=f"Failed to connect to the database: {e}",
                context={"error_type": type(e).__name__},
            ) from e

        table_name = Task.__tablename__
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
                columns = await conn.run_sync(_existing_columns, table_name)
        except SQLAlchemyError as e:
            raise SchemaError(context={"error": str(e)}) from e

        required = {column.name: _python_type(column.type) for column in Task.__table__.columns}
        missing = required.keys() - columns.keys()
        # bool vs str catches a TEXT done column; unknown types are not compared
        mismatched = [
            name
            for name, expected in required.items()
            if name in columns and None not in (expected, columns[name]) and expected is not columns[name]
        ]
        if missing or mismatched:
            raise SchemaError(missing_columns=list(missing), mismatched_columns=mismatched)

        logger.info("Table '%s' ready (columns: %s)", table_name, ", ".join(sorted(columns)))

    async def ping(self) -> None:
        """Round-trips SELECT 1; raises whatever the driver raises."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Closes all pooled connections."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the app's Database
        2. Yields it to the route handler
        3. On error: rolls back anything left uncommitted
        4. Always: closes the session (returns connection to pool)

    Writes are committed by TaskRepository, so nothing is committed here.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
