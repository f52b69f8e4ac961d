"""
Rate Limiting Module
Fixed-window, per-client rate limiting for the contact endpoints.

Counters live in process memory by default. When a Redis URL is configured
they are kept in Redis instead so several workers share one budget, with the
in-memory limiter taking over if Redis becomes unreachable.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

import redis.asyncio as aioredis
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from backend.core.config import Settings
from backend.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


# =============================================================================
# Rate Limit Configuration
# =============================================================================


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limit configuration."""

    requests: int  # Number of requests allowed per window
    window: int  # Window length in seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimitConfig":
        return cls(requests=settings.rate_limit_requests, window=settings.rate_limit_window)


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of counting one request against a client's window."""

    is_limited: bool
    remaining: int
    retry_after: int  # seconds until the current window resets


# =============================================================================
# Redis Rate Limiter
# =============================================================================


class RedisRateLimiter:
    """
    Redis-based fixed window rate limiter.

    The first request of a window creates a counter that expires with the
    window; later requests increment it.
    """

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self._redis: Optional[aioredis.Redis] = None

    async def get_redis(self) -> aioredis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def hit(self, key: str, limit: int, window: int) -> RateLimitResult:
        redis = await self.get_redis()

        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, window)

        ttl = await redis.ttl(key)
        if ttl is None or ttl < 0:
            # Counter lost its expiry (e.g. a crash between INCR and EXPIRE)
            await redis.expire(key, window)
            ttl = window

        return RateLimitResult(
            is_limited=count > limit,
            remaining=max(0, limit - count),
            retry_after=int(ttl),
        )


# =============================================================================
# In-Memory Rate Limiter
# =============================================================================


class InMemoryRateLimiter:
    """
    Fixed window rate limiter backed by a dict.

    Only valid for single-process deployments. Each client's window opens
    with its first request and lasts ``window`` seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_cleanup = clock()
        self._cleanup_interval = 60

    def _cleanup_if_needed(self, now: float, window: int) -> None:
        """Periodically drop expired windows to bound memory."""
        if now - self._last_cleanup < self._cleanup_interval:
            return

        self._last_cleanup = now
        expired = [key for key, (started, _) in self._windows.items() if now - started >= window]
        for key in expired:
            del self._windows[key]

    async def hit(self, key: str, limit: int, window: int) -> RateLimitResult:
        now = self._clock()
        self._cleanup_if_needed(now, window)

        started, count = self._windows.get(key, (now, 0))
        if now - started >= window:
            started, count = now, 0

        count += 1
        self._windows[key] = (started, count)

        return RateLimitResult(
            is_limited=count > limit,
            remaining=max(0, limit - count),
            retry_after=max(1, math.ceil(started + window - now)),
        )

    async def close(self) -> None:
        self._windows.clear()


Limiter = Union[RedisRateLimiter, InMemoryRateLimiter]


def build_rate_limiter(settings: Settings) -> Limiter:
    """Pick the limiter backend for the configured environment."""
    if settings.redis_url:
        logger.info("Rate limiting backed by Redis")
        return RedisRateLimiter(settings.redis_url)
    return InMemoryRateLimiter()


# =============================================================================
# Helper Functions
# =============================================================================


def get_client_ip(request: Request) -> str:
    """Extract the client IP, honouring the first X-Forwarded-For hop."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def build_rate_limit_key(scope: str, ip_address: str) -> str:
    return f"rate_limit:{scope}:ip_{ip_address}"


# =============================================================================
# Rate Limit Dependency
# =============================================================================


class RateLimitDependency:
    """
    FastAPI dependency for rate limiting.

    Usage:
        @router.post("/contact", dependencies=[Depends(RateLimitDependency("contact"))])
        async def contact():
            ...
    """

    def __init__(self, scope: str = "contact"):
        self.scope = scope

    async def __call__(self, request: Request) -> None:
        settings: Settings = request.app.state.settings
        if not settings.rate_limit_enabled:
            return

        config = RateLimitConfig.from_settings(settings)
        key = build_rate_limit_key(self.scope, get_client_ip(request))

        limiter: Limiter = request.app.state.rate_limiter
        try:
            result = await limiter.hit(key, config.requests, config.window)
        except Exception as e:
            # Redis unavailable - keep enforcing limits in memory
            logger.warning(f"Redis rate limiting unavailable, using in-memory fallback: {e}")
            fallback: InMemoryRateLimiter = request.app.state.fallback_rate_limiter
            result = await fallback.hit(key, config.requests, config.window)

        request.state.rate_limit_limit = config.requests
        request.state.rate_limit_remaining = result.remaining
        request.state.rate_limit_reset = int(time.time()) + result.retry_after

        if result.is_limited:
            logger.warning(f"Rate limit exceeded for {key}")
            raise RateLimitError(
                retry_after=result.retry_after,
                headers={
                    "X-RateLimit-Limit": str(config.requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(request.state.rate_limit_reset),
                },
            )


# =============================================================================
# Rate Limit Middleware
# =============================================================================


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add rate limit headers to responses.

    This middleware adds X-RateLimit-* headers to responses when
    rate limiting information is available in request.state.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)

        if hasattr(request.state, "rate_limit_limit"):
            response.headers["X-RateLimit-Limit"] = str(request.state.rate_limit_limit)
            response.headers["X-RateLimit-Remaining"] = str(getattr(request.state, "rate_limit_remaining", 0))
            response.headers["X-RateLimit-Reset"] = str(getattr(request.state, "rate_limit_reset", 0))

        return response
