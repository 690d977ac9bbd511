"""Per-client sliding-window rate limiting for the HTTP transport.

Every request is recorded, including rejected ones, so a client that keeps
hammering stays blocked until it slows down. The limiter is in-memory and
per-process. Keys whose window has emptied are dropped, so memory tracks
recently active clients only.

Clients are keyed on the connection's peer address (``scope["client"]``).
Behind a reverse proxy every caller shares the proxy's address and therefore
one bucket.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from collections.abc import Callable

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("texmcp")


class SlidingWindowLimiter:
    """Allow at most *max_requests* per *window_s* seconds per key."""

    def __init__(
        self,
        max_requests: int = 30,
        window_s: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_s = window_s
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _prune(self, hits: deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window_s:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
        self._last_sweep = now

    def allow(self, key: str) -> bool:
        """Record a request for *key*; False when it exceeds the limit."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_s:
                self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            self._prune(hits, now)
            hits.append(now)
            return len(hits) <= self.max_requests

    def retry_after(self, key: str) -> float:
        """Seconds until the oldest recorded request leaves the window."""
        now = self._clock()
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return 0.0
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
                return 0.0
            return max(0.0, self.window_s - (now - hits[0]))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


def _client_key(scope: Scope) -> str:
    client = scope.get("client")
    return client[0] if client else "unknown"


def _content_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


class RateLimitMiddleware:
    """ASGI middleware: 429 over the rate limit, 413 over the size limit."""

    def __init__(self, app: ASGIApp, limiter: SlidingWindowLimiter, max_request_bytes: int):
        self.app = app
        self.limiter = limiter
        self.max_request_bytes = max_request_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        key = _client_key(scope)
        if not self.limiter.allow(key):
            wait = math.ceil(self.limiter.retry_after(key))
            logger.warning("Rate limit exceeded for %s on %s", key, scope.get("path", ""))
            resp = JSONResponse(
                {"error": "Too many requests"},
                status_code=429,
                headers={"Retry-After": str(wait)},
            )
            await resp(scope, receive, send)
            return

        length = _content_length(scope)
        if length is not None and length > self.max_request_bytes:
            logger.warning("Request from %s too large: %d bytes", key, length)
            resp = JSONResponse({"error": "Request entity too large"}, status_code=413)
            await resp(scope, receive, send)
            return

        await self.app(scope, receive, send)
