"""
Inkwell Backend: Access Log Middleware
========================================

What:  One access log line per HTTP request, on the `inkwell.access` logger.
How:   Resolves the request against the app's routes before calling
       downstream, so each line names the endpoint that served it (e.g.
       `get_post`) and, for single-post endpoints, the post id from the path.
       Request bodies are never logged.

Example:
    GET /posts/3f0c... 404 2.4ms get_post post=3f0c... [a1b2c3d4] from 10.0.0.7

Level by status: 5xx ERROR, 4xx WARNING, otherwise INFO.
"""

import logging
import time
from typing import Any, Dict, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from inkwell.middleware.request_id import request_id_var

logger = logging.getLogger("inkwell.access")


def resolve_endpoint(request: Request) -> Tuple[Optional[str], Dict[str, Any]]:
    """Name and path params of the route that will serve `request`, if any."""
    router = getattr(request.app, "router", None)
    for route in getattr(router, "routes", ()):
        match, child_scope = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "name", None), child_scope.get("path_params", {})
    return None, {}


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log line for every request except /health checks."""

    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.QUIET_PATHS:
            return await call_next(request)

        endpoint, path_params = resolve_endpoint(request)
        post_id = path_params.get("post_id")

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        rid = request_id_var.get("")
        client = request.client.host if request.client else "unknown"
        target = endpoint or "unmatched"
        if post_id is not None:
            target = f"{target} post={post_id}"

        logger.log(
            level_for(response.status_code),
            "%s %s %d %.1fms %s [%s] from %s",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            target,
            rid,
            client,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "endpoint": endpoint,
                "post_id": post_id,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
                "client_ip": client,
            },
        )
        return response
