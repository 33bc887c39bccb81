"""In-memory rate limiting for endpoints that send email."""

import math
import time
from collections import deque

from fastapi import Request


def client_key(request: Request) -> str:
    """Client IP, taking the first hop of X-Forwarded-For behind the proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """
    Sliding-window limiter: at most max_requests per window_seconds per client.

    State is per process; with several workers each enforces its own window.
    """

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = {}

    def _prune(self, key: str, now: float) -> deque[float]:
        """Drop hits older than the window; forget the client once none remain."""
        hits = self._hits.get(key, deque())
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        if not hits:
            self._hits.pop(key, None)
        return hits

    def allow(self, request: Request) -> bool:
        """Count this request; False once the client is over the limit."""
        key = client_key(request)
        now = time.monotonic()
        hits = self._prune(key, now)
        if len(hits) >= self.max_requests:
            return False
        hits.append(now)
        self._hits[key] = hits
        return True

    def retry_after(self, request: Request) -> int:
        """Seconds until the client's oldest counted request leaves the window."""
        now = time.monotonic()
        hits = self._prune(client_key(request), now)
        if len(hits) < self.max_requests:
            return 0
        return max(1, math.ceil(hits[0] + self.window_seconds - now))

    def reset(self) -> None:
        self._hits.clear()


# 20 invite emails per minute per client
calendar_invite_limiter = RateLimiter(max_requests=20, window_seconds=60)
