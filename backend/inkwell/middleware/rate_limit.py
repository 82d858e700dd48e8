"""
Inkwell Backend: Rate Limiting Middleware
===========================================

What:  Per-client request budget for the post endpoints.
How:   Each client IP owns a deque of hit times. Hits older than the window
       are popped from the left before the budget is checked, so the deque
       length is always the number of requests inside the current window.

Only paths under /posts are counted. /health, the OpenAPI docs, and anything
else mounted on the app pass through untouched.

State is per process. Multiple workers each keep their own budget.
"""

import logging
import time
from collections import deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from inkwell.config import settings
from inkwell.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window limiter keyed by client IP.

    `max_requests` / `window_seconds` default to the settings values when
    not given. An explicit 0 for `max_requests` rejects every counted request.
    """

    LIMITED_PREFIX = "/posts"
    # Forget idle clients once this many are tracked
    MAX_TRACKED_CLIENTS = 10_000

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self.max_requests = (
            settings.rate_limit_requests if max_requests is None else max_requests
        )
        self.window_seconds = (
            settings.rate_limit_window if window_seconds is None else window_seconds
        )
        self._hits: Dict[str, Deque[float]] = {}

    def is_limited(self, path: str) -> bool:
        return path == self.LIMITED_PREFIX or path.startswith(self.LIMITED_PREFIX + "/")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.is_limited(request.url.path):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        now = time.monotonic()
        hits = self._window_for(client, now)

        if len(hits) >= self.max_requests:
            oldest = hits[0] if hits else now
            retry_after = max(1, int(oldest + self.window_seconds - now) + 1)
            logger.warning(
                "Rate limit hit by %s on %s %s (%d in %ds)",
                client,
                request.method,
                request.url.path,
                len(hits),
                self.window_seconds,
            )
            return self._too_many_requests(retry_after)

        hits.append(now)
        return await call_next(request)

    def _window_for(self, client: str, now: float) -> Deque[float]:
        """Return the client's hits inside the window, creating or trimming as needed."""
        horizon = now - self.window_seconds
        hits = self._hits.get(client)
        if hits is None:
            if len(self._hits) >= self.MAX_TRACKED_CLIENTS:
                self._forget_idle(horizon)
            hits = self._hits[client] = deque()
        while hits and hits[0] <= horizon:
            hits.popleft()
        return hits

    def _forget_idle(self, horizon: float) -> None:
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= horizon]
        for ip in idle:
            del self._hits[ip]
        logger.debug("Forgot %d idle rate-limit clients", len(idle))

    @staticmethod
    def _too_many_requests(retry_after: int) -> JSONResponse:
        # Exceptions raised in middleware never reach the app's handlers
        exc = RateLimitExceededError(retry_after=retry_after)
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": exc.message,
                "details": exc.context,
            },
            headers={"Retry-After": str(retry_after)},
        )
