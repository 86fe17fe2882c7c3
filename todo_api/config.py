"""
Todo API — Application Configuration
======================================

What:  Centralized configuration using Pydantic Settings.
How:   Reads DB_* and server variables from the environment (or a .env file),
       validates them, and builds the SQLAlchemy connection URL.
When:  A Settings instance is created by create_app(); `settings` below is the
       process-wide default.
"""

from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL, make_url


VALID_SSL_MODES = {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The DB_* fields describe a PostgreSQL server and are assembled into a
    `postgresql+asyncpg` URL. DATABASE_URL, when set, replaces them entirely
    (tests point it at a sqlite+aiosqlite file).
    """

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(default="localhost")
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="")
    db_name: str = Field(default="todos")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_sslmode: str = Field(default="disable")

    database_url: Optional[str] = Field(
        default=None,
        description="Full async SQLAlchemy URL; overrides the DB_* parts",
    )

    # Pool sizing, only applied to server databases
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("db_sslmode")
    @classmethod
    def validate_sslmode(cls, v: str) -> str:
        lower = v.lower()
        if lower not in VALID_SSL_MODES:
            raise ValueError(f"Invalid db_sslmode '{v}'. Must be one of: {VALID_SSL_MODES}")
        return lower

    @property
    def sqlalchemy_url(self) -> URL:
        """
        What:  The async connection URL for create_async_engine().
        How:   URL.create() quotes user/password, so credentials containing
               '@' or '/' survive intact.
        """
        if self.database_url:
            return make_url(self.database_url)
        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url.get_backend_name() == "sqlite"

    @property
    def engine_options(self) -> Dict[str, Any]:
        """
        Keyword arguments for create_async_engine().

        SQLite gets none: its pool classes reject pool_size/max_overflow.
        asyncpg takes the libpq sslmode names through its `ssl` argument. The
        mode is always set, including "disable", so PGSSLMODE and asyncpg's
        own "prefer" default never apply.
        """
        if self.is_sqlite:
            return {}
        options: Dict[str, Any] = {
            "pool_size": self.db_pool_size,
            "max_overflow": self.db_max_overflow,
            "pool_pre_ping": self.db_pool_pre_ping,
            "pool_recycle": 3600,
            "connect_args": {"ssl": self.db_sslmode},
        }
        return options


settings = Settings()
