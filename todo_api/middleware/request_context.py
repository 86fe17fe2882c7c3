"""
Todo API — Request Context Middleware
=======================================

What:  Gives every request a short id and writes one access log line for it.
How:   The id comes from a non-empty X-Request-ID header or is generated,
       lives in a ContextVar while the request runs, and is echoed back in
       the response header.

The access line names the matched route template ("/todos/view/{task_id}")
rather than the raw path, plus the task id when the route has one, so lines
for the same endpoint group together. Request bodies are never logged.
"""

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("todo_api.access")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

QUIET_PATHS = {"/health"}


def _status_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        request.state.request_id = rid
        started = time.perf_counter()

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid

        path = request.url.path
        if path in QUIET_PATHS:
            return response

        # The router fills in route and path_params on the shared scope
        route = getattr(request.scope.get("route"), "path", path)
        task_id = request.scope.get("path_params", {}).get("task_id")
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            _status_level(response.status_code),
            "%s %s%s %d %.1fms [%s]",
            request.method,
            route,
            f" task_id={task_id}" if task_id is not None else "",
            response.status_code,
            elapsed_ms,
            rid,
        )
        return response
