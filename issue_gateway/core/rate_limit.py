"""Per-client request throttling applied as a router dependency."""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Callable, NamedTuple

from fastapi import Request, Response

from issue_gateway.core.config import settings
from issue_gateway.core.exceptions import RateLimitExceeded


class RateDecision(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int


class SlidingWindowLimiter:
    """Counts request timestamps per key over a trailing window."""

    def __init__(self) -> None:
        self._windows: dict[str, deque[float]] = {}
        self._lock = Lock()
        self._last_sweep = 0.0

    def __len__(self) -> int:
        return len(self._windows)

    def hit(self, key: str, *, limit: int, window_seconds: int, now: float | None = None) -> RateDecision:
        if limit <= 0:
            return RateDecision(True, limit, 0)
        now = time.time() if now is None else now
        cutoff = now - window_seconds
        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now
            window = self._windows.setdefault(key, deque())
            self._expire(window, cutoff)
            if len(window) >= limit:
                oldest = window[0]
                return RateDecision(False, 0, max(int(oldest + window_seconds - now), 1))
            window.append(now)
            return RateDecision(True, limit - len(window), 0)

    def _sweep(self, cutoff: float) -> None:
        for key in list(self._windows):
            window = self._windows[key]
            self._expire(window, cutoff)
            if not window:
                del self._windows[key]

    @staticmethod
    def _expire(window: deque[float], cutoff: float) -> None:
        while window and window[0] <= cutoff:
            window.popleft()

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


_limiter = SlidingWindowLimiter()


def _scope_limits() -> dict[str, int]:
    return {
        "default": settings.RATE_LIMIT_MAX_REQUESTS,
        "upload": settings.RATE_LIMIT_UPLOAD_MAX_REQUESTS,
    }


def _client_key(request: Request, scope: str) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    address = forwarded.split(",")[0].strip() or (request.client.host if request.client else "unknown")
    return f"{scope}:{address}"


def rate_limit(scope: str = "default") -> Callable[[Request, Response], None]:
    def _dependency(request: Request, response: Response) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        limit = _scope_limits().get(scope, settings.RATE_LIMIT_MAX_REQUESTS)
        window_seconds = settings.RATE_LIMIT_WINDOW_SECONDS
        decision = _limiter.hit(_client_key(request, scope), limit=limit, window_seconds=window_seconds)
        if not decision.allowed:
            raise RateLimitExceeded(retry_after=decision.retry_after, limit=limit, window_seconds=window_seconds)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)

    return _dependency
