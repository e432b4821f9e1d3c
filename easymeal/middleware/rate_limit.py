from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

_PRUNE_EVERY = 100  # calls between sweeps of expired windows


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    Fixed-window request counter held in process memory.

    Each key gets ``max_requests`` calls per ``window_seconds``; the window
    starts on the first call after the previous one expired.
    """

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._calls = 0

    def hit(self, key: str) -> bool:
        """Count a call for ``key``. Returns ``False`` once the key is over the limit."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now > window.reset_at:
            window = _Window(count=0, reset_at=now + self.window_seconds)
            self._windows[key] = window
        window.count += 1

        self._calls += 1
        if self._calls % _PRUNE_EVERY == 0:
            self._prune(now)

        return window.count <= self.max_requests

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now > w.reset_at]
        for key in expired:
            del self._windows[key]

    def __len__(self) -> int:
        return len(self._windows)

    def reset(self) -> None:
        self._windows.clear()
        self._calls = 0


def client_key(request: Request) -> str:
    return request.headers.get("x-forwarded-for") or "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limiter: RateLimiter,
        path_prefix: str = "/api/",
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(self.path_prefix):
            if not self.limiter.hit(client_key(request)):
                return JSONResponse({"error": "Too many requests"}, status_code=429)
        return await call_next(request)
