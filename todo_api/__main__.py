"""
Todo API — Server Entry Point
===============================

Usage:
    python -m todo_api
    todo-api                      (console script)

Serves todo_api.main:app with uvicorn on HOST:PORT (default 0.0.0.0:8080).
If the database is unreachable or the tasks table is incompatible, startup
fails and uvicorn exits with a non-zero status.
"""

import uvicorn

from todo_api.config import settings


def main() -> None:
    uvicorn.run(
        "todo_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
