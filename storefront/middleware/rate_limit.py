"""
Storefront Backend — Auth Rate Limiting Middleware
====================================================

What:  Per-IP sliding-window limit on credential endpoints
       (POST /api/auth/login and POST /api/auth/register).
How:   In-memory list of request timestamps per client IP. Entries older
       than the window are dropped on each hit; at the limit the request is
       answered with 429 and a Retry-After header without reaching the route.

Single-process only: each worker keeps its own counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, FrozenSet, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from storefront.exceptions import RateLimitExceededError
from storefront.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LIMITED_PATHS: FrozenSet[str] = frozenset({"/api/auth/login", "/api/auth/register"})


class AuthRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests: attempts allowed per IP within the window
        window_seconds: window length
    """

    CLEANUP_EVERY = 1000

    def __init__(self, app, max_requests: int = 20, window_seconds: int = 300, **kwargs):
        super().__init__(app, **kwargs)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    def is_limited(self, request: Request) -> bool:
        return request.method == "POST" and request.url.path in LIMITED_PATHS

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.is_limited(request):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window_seconds

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            logger.warning(
                "Auth rate limit exceeded for IP %s: %d attempts in %ds",
                client_ip,
                len(timestamps),
                self.window_seconds,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive:
            del self._requests[ip]
        if inactive:
            logger.debug("Dropped rate-limit state for %d inactive IPs", len(inactive))
