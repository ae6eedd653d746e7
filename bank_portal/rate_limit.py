"""
Rate limiting for sensitive endpoints.

A fixed-window counter kept in process memory, keyed by client IP and the
route template being called, so `/admin/accounts/{account_id}/credit`
has one budget across all accounts. Each limited route declares its budget
with the ``rate_limit`` dependency factory:

    @router.post("", dependencies=[Depends(rate_limit(10, 60))])

When a client exceeds its budget the dependency raises
RateLimitExceededError, which the exception handlers turn into a 429 with a
Retry-After header.

State is per process. Behind several workers each one counts separately,
which is acceptable for the abuse cases these limits target (signup and
password-reset spraying, transfer floods).
"""

import threading
import time
from typing import NamedTuple

import structlog
from fastapi import Request

from bank_portal.config import settings
from bank_portal.exceptions import RateLimitExceededError

logger = structlog.get_logger()

_MAX_TRACKED_KEYS = 10_000


class RateLimitResult(NamedTuple):
    """Result of a rate limit check."""

    allowed: bool
    remaining: int
    reset_at: float  # Unix timestamp
    limit: int


class FixedWindowRateLimiter:
    """Counts requests per key in fixed windows starting at the first hit."""

    def __init__(self):
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str, limit: int, window_seconds: int, now: float | None = None) -> RateLimitResult:
        now = time.time() if now is None else now
        with self._lock:
            count, reset_at = self._windows.get(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds
                if len(self._windows) > _MAX_TRACKED_KEYS:
                    self._drop_expired(now)
            if count >= limit:
                return RateLimitResult(False, 0, reset_at, limit)
            count += 1
            self._windows[key] = (count, reset_at)
            return RateLimitResult(True, limit - count, reset_at, limit)

    def _drop_expired(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._windows.items() if now >= reset_at]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


limiter = FixedWindowRateLimiter()


def rate_limit(max_requests: int, window_seconds: int = 60):
    """Build a dependency allowing ``max_requests`` per client per window."""

    async def dependency(request: Request) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        client_ip = request.client.host if request.client else "unknown"
        route = request.scope.get("route")
        path = route.path if route is not None else request.url.path
        key = f"{client_ip}:{request.method}:{path}"
        result = limiter.check(key, max_requests, window_seconds)
        if not result.allowed:
            retry_after = max(1, int(result.reset_at - time.time()))
            logger.warning(
                "rate_limit_exceeded",
                client_ip=client_ip,
                path=path,
                limit=max_requests,
                retry_after=retry_after,
            )
            raise RateLimitExceededError(retry_after)

    return dependency
