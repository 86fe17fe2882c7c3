"""
Todo API — FastAPI Application Factory
========================================

What:  Builds the FastAPI application: storage handle, middleware, exception
       handlers and routes.
How:   create_app(settings) returns a configured instance; the module-level
       `app` is what uvicorn serves.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request context (id + access log)      │
    │                                                     │
    │  Routes:      /todos/*            /health           │
    │                                                     │
    │  Exception Handlers (plain-text bodies):            │
    │    RequestError→400  NotFound→404  Method→405       │
    │    StorageError→500  Exception→500                  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Connect and ensure the tasks table exists (fatal on failure)

    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_api import __version__
from todo_api.config import Settings, settings as default_settings
from todo_api.database import Database
from todo_api.exceptions import (
    DatabaseConnectionError,
    MethodNotAllowedError,
    RequestError,
    SchemaError,
    TodoAPIError,
)
from todo_api.middleware.request_context import RequestContextMiddleware, request_id_var
from todo_api.routes import health, todos

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure the root logger once per process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # The access middleware already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if log_level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then ensure_schema(). A DatabaseConnectionError or
    SchemaError is logged and re-raised, which makes uvicorn abort startup
    and exit.

    Shutdown: dispose the engine.
    """
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(app_settings.log_level)
    logger.info("Todo API %s starting up...", __version__)

    try:
        await database.ensure_schema()
    except (DatabaseConnectionError, SchemaError) as e:
        logger.critical("Startup failed: %s", e.message)
        await database.dispose()
        raise

    logger.info("Server ready at http://%s:%d", app_settings.host, app_settings.port)

    yield

    logger.info("Todo API shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _plain_text_error(exc: TodoAPIError, headers: Optional[dict] = None) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to plain-text responses.

        RequestValidationError    → 400 (RequestError)
        TodoAPIError subclasses   → their status_code
        Starlette 405             → 405 (MethodNotAllowedError)
        Other HTTPException       → its status and detail
        Exception (fallback)      → 500
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body that is not a JSON object of strings, or a non-numeric id."""
        rid = request_id_var.get("")
        errors = exc.errors()
        if any(err.get("loc", ("",))[0] == "path" for err in errors):
            error = RequestError(message="Invalid task id", field="task_id")
        else:
            error = RequestError(message="Invalid JSON", context={"errors": len(errors)})
        logger.warning("[%s] Bad request: %s", rid, error.message)
        return _plain_text_error(error)

    @app.exception_handler(TodoAPIError)
    async def handle_todo_api_error(request: Request, exc: TodoAPIError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.info("[%s] %s", rid, exc.message)
        return _plain_text_error(exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return _plain_text_error(MethodNotAllowedError(method=request.method), exc.headers)
        return PlainTextResponse(
            str(exc.detail), status_code=exc.status_code, headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return PlainTextResponse("Internal Server Error", status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Each call builds its own Database from `app_settings` (default: the
    process settings), so tests can run isolated instances side by side.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Todo API",
        description="Create, list, view, update, complete and delete tasks.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.database = Database(
        app_settings.sqlalchemy_url,
        echo=app_settings.log_level == "DEBUG",
        **app_settings.engine_options,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    app.add_middleware(RequestContextMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(todos.router)
    app.include_router(health.router)

    return app


app = create_app()
