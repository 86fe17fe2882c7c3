"""
Todo API — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for each failure the API reports.
How:   Each exception carries a message, an optional context dict and the
       HTTP status it maps to. Global handlers registered in main.py turn
       them into plain-text responses.

Exception Hierarchy:
    TodoAPIError (base)
    ├── DatabaseConnectionError  → startup-fatal (database unreachable)
    ├── SchemaError              → startup-fatal (incompatible tasks table)
    ├── RequestError             → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── MethodNotAllowedError    → 405 Method Not Allowed
    └── StorageError             → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class TodoAPIError(Exception):
    """
    Base exception for all Todo API errors.

    Attributes:
        message:     Text returned in the response body
        context:     Additional debug info (logged, not returned)
        status_code: HTTP status used by the global handler
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DatabaseConnectionError(TodoAPIError):
    """
    Raised when the database cannot be reached at startup.

    When:  Server down, wrong host/port, invalid credentials, missing SQLite file directory.
    Fatal: The lifespan handler logs it and re-raises so the server exits.
    """

    def __init__(
        self,
        message: str = "Failed to connect to the database",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SchemaError(TodoAPIError):
    """
    Raised when an existing tasks table does not fit the Task model.

    missing_columns are absent from the table; mismatched_columns exist but
    hold a different kind of value (e.g. a TEXT `done`).
    """

    def __init__(
        self,
        missing_columns: Optional[list] = None,
        mismatched_columns: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        missing = sorted(missing_columns or [])
        mismatched = sorted(mismatched_columns or [])
        problems = []
        if missing:
            problems.append(f"missing columns {', '.join(missing)}")
        if mismatched:
            problems.append(f"incompatible column types {', '.join(mismatched)}")
        message = "Incompatible tasks table"
        if problems:
            message = f"{message}: {'; '.join(problems)}"
        ctx = context or {}
        ctx["missing_columns"] = missing
        ctx["mismatched_columns"] = mismatched
        super().__init__(message=message, context=ctx)
        self.missing_columns = missing
        self.mismatched_columns = mismatched


class RequestError(TodoAPIError):
    """
    Raised when the client sent something that cannot be decoded.

    When:  Body is not JSON, not an object, or has wrongly typed fields;
           or the path id is not a positive integer.
    HTTP:  400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid JSON",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(TodoAPIError):
    """
    Raised when a requested task does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts that
    into this exception so the handler can answer 404.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Task",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class MethodNotAllowedError(TodoAPIError):
    """Raised for a known path requested with the wrong HTTP verb."""

    status_code = 405

    def __init__(
        self,
        method: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if method:
            ctx["method"] = method
        super().__init__(message="Method not allowed", context=ctx)


class StorageError(TodoAPIError):
    """
    Raised when a database statement fails during a request.

    The driver's error text is passed through as the response body, so
    clients see the same message the database reported.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
