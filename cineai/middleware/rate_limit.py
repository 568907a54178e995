"""
Rate limiting middleware for API endpoints.

Sliding-window limits per client IP, kept in process memory. Limits are
per process: run behind a shared store if the service is scaled out.
"""

import threading
import time
from typing import Dict, List, Optional, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class RateLimiter:
    """In-memory sliding-window rate limiter."""

    def __init__(self, cleanup_interval: int = 300, clock=time.time):
        # {key: [timestamp, ...]}
        self.requests: Dict[str, List[float]] = {}
        self.cleanup_interval = cleanup_interval
        self.clock = clock
        self.last_cleanup = clock()
        self._lock = threading.Lock()

    def _cleanup(self, now: float):
        """Drop keys with no request in the last hour."""
        if now - self.last_cleanup <= self.cleanup_interval:
            return
        cutoff = now - 3600
        for key in list(self.requests.keys()):
            self.requests[key] = [ts for ts in self.requests[key] if ts > cutoff]
            if not self.requests[key]:
                del self.requests[key]
        self.last_cleanup = now

    def is_allowed(self, key: str, limit: int, window: int) -> Tuple[bool, Dict[str, str]]:
        """
        Check if a request is allowed under a rate limit.

        Args:
            key: Unique identifier for the bucket, e.g. "auth:1.2.3.4"
            limit: Maximum number of requests allowed
            window: Time window in seconds

        Returns:
            Tuple of (allowed, headers) where headers carry the
            X-RateLimit-* values for the response
        """
        with self._lock:
            now = self.clock()
            self._cleanup(now)

            window_start = now - window
            current = [ts for ts in self.requests.get(key, []) if ts > window_start]

            allowed = len(current) < limit
            if allowed:
                current.append(now)
                remaining = limit - len(current)
            else:
                remaining = 0
            self.requests[key] = current

            reset_time = int(min(current) + window) if current else int(now + window)

        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(max(0, remaining)),
            "X-RateLimit-Reset": str(reset_time)
        }
        return allowed, headers


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Apply rate limits to requests.

    Auth endpoints: 5 requests/minute per IP
    Identification uploads: 10 requests/minute per IP
    Everything else: 100 requests/minute per IP
    """

    def __init__(
        self,
        app: ASGIApp,
        auth_limit: int = 5,
        upload_limit: int = 10,
        api_limit: int = 100,
        window: int = 60,
        enabled: bool = True,
        limiter: Optional[RateLimiter] = None,
    ):
        super().__init__(app)
        self.auth_limit = auth_limit
        self.upload_limit = upload_limit
        self.api_limit = api_limit
        self.window = window
        self.enabled = enabled
        self.limiter = limiter or RateLimiter()

    def _bucket(self, path: str, client_ip: str) -> Tuple[str, int, str]:
        if path.startswith("/api/auth/"):
            return f"auth:{client_ip}", self.auth_limit, \
                "Too many authentication attempts. Please try again later."
        if path.startswith("/api/ai/identify"):
            return f"upload:{client_ip}", self.upload_limit, \
                "Too many identification requests. Please slow down."
        return f"api:{client_ip}", self.api_limit, "Too many requests. Please slow down."

    async def dispatch(self, request: Request, call_next):
        if not self.enabled:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key, limit, message = self._bucket(request.url.path, client_ip)

        allowed, headers = self.limiter.is_allowed(key, limit, self.window)
        if not allowed:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": message},
                headers=headers
            )

        response = await call_next(request)
        for header_name, header_value in headers.items():
            response.headers[header_name] = header_value
        return response
