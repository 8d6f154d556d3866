"""Fixed-window rate limiting over a swappable counter store.

``MemoryCounterStore`` suits a single process; ``RedisCounterStore`` shares
counters between instances. The active store is chosen by
``RATE_LIMIT_BACKEND`` and can be replaced with ``set_counter_store``.
"""

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from fastapi import Request, Response

from donation_hub.core.config import settings
from donation_hub.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


class CounterStore(Protocol):
    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        """Increment ``key`` in the current window. Returns (count, reset_at epoch seconds)."""
        ...


class MemoryCounterStore:
    """Per-process counters. Expired windows are dropped once ``max_keys`` is reached."""

    def __init__(self, clock: Callable[[], float] = time.time, max_keys: int = 10_000):
        self._clock = clock
        self._max_keys = max_keys
        self._buckets: dict[str, tuple[int, float]] = {}

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._buckets.items() if reset_at <= now]
        for key in expired:
            del self._buckets[key]

    def __len__(self) -> int:
        return len(self._buckets)

    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        now = self._clock()
        if key not in self._buckets and len(self._buckets) >= self._max_keys:
            self._prune(now)
        count, reset_at = self._buckets.get(key, (0, 0.0))
        if reset_at <= now:
            count, reset_at = 0, now + window_seconds
        count += 1
        self._buckets[key] = (count, reset_at)
        return count, reset_at


class RedisCounterStore:
    def __init__(self, url: str):
        import redis.asyncio as aioredis

        self._redis = aioredis.from_url(url)

    async def hit(self, key: str, window_seconds: int) -> tuple[int, float]:
        redis_key = f"ratelimit:{key}"
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.incr(redis_key)
            pipe.expire(redis_key, window_seconds, nx=True)
            pipe.pttl(redis_key)
            count, _, ttl_ms = await pipe.execute()
        ttl = ttl_ms / 1000 if ttl_ms and ttl_ms > 0 else window_seconds
        return int(count), time.time() + ttl


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(self.remaining, 0)),
            "X-RateLimit-Reset": str(math.ceil(self.reset_at)),
        }


_store: CounterStore | None = None


def get_counter_store() -> CounterStore:
    global _store  # noqa: PLW0603
    if _store is None:
        if settings.RATE_LIMIT_BACKEND == "redis":
            _store = RedisCounterStore(settings.REDIS_URL)
        else:
            _store = MemoryCounterStore()
    return _store


def set_counter_store(store: CounterStore | None) -> None:
    global _store  # noqa: PLW0603
    _store = store


async def apply_rate_limit(
    key: str, limit: int, window_seconds: int, store: CounterStore | None = None
) -> RateLimitResult:
    count, reset_at = await (store or get_counter_store()).hit(key, window_seconds)
    return RateLimitResult(
        allowed=count <= limit,
        limit=limit,
        remaining=limit - count,
        reset_at=reset_at,
    )


def client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = next((p.strip() for p in forwarded.split(",") if p.strip()), None)
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client:
        return request.client.host
    return "unknown"


def rate_limit(scope: str, limit: int, window_seconds: int = 60):
    """Build a route dependency enforcing ``limit`` requests per window per client."""

    async def _dependency(request: Request, response: Response) -> None:
        key = f"{scope}:{client_identifier(request)}"
        result = await apply_rate_limit(key, limit, window_seconds)
        if not result.allowed:
            logger.warning("Rate limit hit for %s", key)
            raise RateLimitExceeded(result.headers())
        response.headers.update(result.headers())

    return _dependency
