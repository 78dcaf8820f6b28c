"""In-memory sliding-window rate limiting for the compute-heavy endpoints."""

from __future__ import annotations

import time
from collections import defaultdict

from fastapi import HTTPException, Request, status


class RateLimiter:
    """Sliding-window request counter keyed by client IP."""

    def __init__(self, max_requests: int = 5, window_seconds: int = 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._requests: dict[str, list[float]] = defaultdict(list)

    def _client_key(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def check(self, request: Request) -> None:
        """Raise 429 if the client has used up its window."""
        now = time.time()
        key = self._client_key(request)
        cutoff = now - self.window_seconds
        recent = [t for t in self._requests[key] if t > cutoff]

        if len(recent) >= self.max_requests:
            self._requests[key] = recent
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=(
                    f"Rate limit exceeded. Max {self.max_requests} requests "
                    f"per {self.window_seconds}s."
                ),
            )

        recent.append(now)
        self._requests[key] = recent

    def reset(self) -> None:
        self._requests.clear()


upload_limiter = RateLimiter(max_requests=20, window_seconds=60)
simulation_limiter = RateLimiter(max_requests=20, window_seconds=60)
sweep_limiter = RateLimiter(max_requests=5, window_seconds=60)
export_limiter = RateLimiter(max_requests=10, window_seconds=60)
weather_limiter = RateLimiter(max_requests=10, window_seconds=60)
