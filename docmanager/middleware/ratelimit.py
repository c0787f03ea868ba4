"""Per-caller rate limiting for upload endpoints.

Login is not throttled here.
"""

import threading
import time
from collections import deque
from typing import Callable, Iterable

from fastapi import Request
from fastapi.responses import JSONResponse

from docmanager.errors import InvalidToken
from docmanager.utils.security import decode_token


class SlidingWindowLimiter:
    """Keeps the timestamps of recent calls per key."""

    def __init__(self, max_calls: int, window_seconds: int) -> None:
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._calls: dict[str, deque[float]] = {}
        self._last_sweep: float | None = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._calls)

    def _prune(self, calls: deque[float], now: float) -> None:
        while calls and calls[0] <= now - self.window_seconds:
            calls.popleft()

    def _sweep(self, now: float) -> None:
        # at most once per window; drops keys with no call left in it
        if self._last_sweep is not None and now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self._calls):
            calls = self._calls[key]
            self._prune(calls, now)
            if not calls:
                del self._calls[key]

    def check(self, key: str, now: float | None = None) -> int | None:
        """Record a call for ``key``; return seconds to wait if it is over quota, else None."""
        if now is None:
            now = time.monotonic()

        with self._lock:
            self._sweep(now)
            calls = self._calls.setdefault(key, deque())
            self._prune(calls, now)

            if len(calls) >= self.max_calls:
                return max(1, int(calls[0] + self.window_seconds - now))

            calls.append(now)
            return None


def rate_limit_key(request: Request) -> str:
    """Bucket by token subject when the bearer token verifies, else by client address."""
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        try:
            return f"user:{decode_token(auth.split(' ', 1)[1].strip())['sub']}"
        except InvalidToken:
            pass

    return f"ip:{request.client.host if request.client else 'unknown'}"


class RateLimitMiddleware:
    def __init__(
        self,
        app,
        *,
        window_seconds: int,
        max_calls: int,
        key_func: Callable[[Request], str] = rate_limit_key,
        include_path_prefixes: Iterable[str] = ("/documents/upload",),
    ) -> None:
        self.app = app
        self.limiter = SlidingWindowLimiter(max_calls, window_seconds)
        self.key_func = key_func
        self.guarded = tuple(include_path_prefixes)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or not scope.get("path", "").startswith(self.guarded):
            return await self.app(scope, receive, send)

        key = self.key_func(Request(scope, receive=receive))
        retry_after = self.limiter.check(key)
        if retry_after is None:
            return await self.app(scope, receive, send)

        response = JSONResponse(
            status_code=429,
            content={
                "detail": {
                    "error": "rate_limited",
                    "message": f"Too many uploads, try again in {retry_after}s",
                }
            },
            headers={"Retry-After": str(retry_after)},
        )
        await response(scope, receive, send)
