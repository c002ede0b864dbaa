"""
ResilienceHub Backend — Rate Limiting Middleware
================================================

What:  Per-IP sliding window rate limiter with two buckets.
How:   Keeps request timestamps per (bucket, IP) in memory. Requests older
       than the window are dropped on each hit; a full window is answered with
       429 and a Retry-After header.

Buckets:
    auth     POST /api/auth/login, POST /api/auth/register
             AUTH_RATE_LIMIT_REQUESTS per AUTH_RATE_LIMIT_WINDOW (5 / 15 min)
    api      every other /api path
             RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW (100 / min)

/health and the API docs are never limited.

Scope:
    State is process-local. Multi-worker deployments need a shared store
    (e.g. Redis) for the limits to hold across workers.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from resilience_hub.config import settings
from resilience_hub.middleware.request_id import REQUEST_ID_HEADER, request_id_var

logger = logging.getLogger(__name__)

AUTH_PATHS = {"/api/auth/login", "/api/auth/register"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    CLEANUP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[Tuple[str, str], List[float]] = defaultdict(list)
        self._hits = 0

    def _bucket(self, request: Request) -> Optional[Tuple[str, int, int]]:
        """(bucket name, limit, window seconds) for the request, or None when unlimited."""
        path = request.url.path
        if path in self.EXCLUDED_PATHS or not path.startswith("/api"):
            return None
        if request.method == "POST" and path in AUTH_PATHS:
            return "auth", settings.auth_rate_limit_requests, settings.auth_rate_limit_window
        return "api", settings.rate_limit_requests, settings.rate_limit_window

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        bucket = self._bucket(request)
        if bucket is None:
            return await call_next(request)

        name, limit, window = bucket
        client_ip = request.client.host if request.client else "unknown"
        key = (name, client_ip)
        now = time.time()
        window_start = now - window

        timestamps = [ts for ts in self._requests[key] if ts > window_start]
        self._requests[key] = timestamps

        if len(timestamps) >= limit:
            retry_after = int(timestamps[0] + window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s on %s bucket: %d requests in %ds window",
                client_ip, name, len(timestamps), window,
            )
            headers = {"Retry-After": str(retry_after)}
            rid = request_id_var.get("")
            if rid:
                headers[REQUEST_ID_HEADER] = rid
            return JSONResponse(
                status_code=429,
                content={"message": "Too many requests, please try again later."},
                headers=headers,
            )

        timestamps.append(now)

        self._hits += 1
        if self._hits % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive(now)

        return await call_next(request)

    def _cleanup_inactive(self, now: float) -> None:
        longest = max(settings.rate_limit_window, settings.auth_rate_limit_window)
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < now - longest
        ]
        for key in inactive:
            del self._requests[key]
        if inactive:
            logger.debug("Cleaned up %d inactive rate-limit entries", len(inactive))
