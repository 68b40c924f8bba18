"""Cache-backed fixed-window rate limiter.

One counter per identifier under ``ratelimit:{identifier}``. The first
request in a window creates the counter with the window as its TTL; every
request increments it; the window resets when the key expires.

Fails open: if the cache cannot count, the request is allowed. Losing
rate limiting during a cache outage beats refusing every request.
"""

import logging

from skillforged.hooks.cache import CacheError
from skillforged.hooks.interfaces import CacheStore, RateLimiter
from skillforged.schemas import RateLimitResult

logger = logging.getLogger("skillforged.ratelimit")


class CacheRateLimiter(RateLimiter):
    """RateLimiter over CacheStore.increment.

    Args:
        cache: The shared cache store.
    """

    def __init__(self, cache: CacheStore) -> None:
        self._cache = cache

    async def check(
        self, identifier: str, max_requests: int, window_seconds: int
    ) -> RateLimitResult:
        key = f"ratelimit:{identifier}"
        try:
            count = await self._cache.increment(key, window_seconds)
            reset_in = await self._cache.ttl(key)
        except CacheError:
            logger.warning("Rate limit check failed for %s, allowing", identifier)
            return RateLimitResult(allowed=True, remaining=max_requests, reset_in=0)

        if reset_in < 0:
            reset_in = window_seconds

        return RateLimitResult(
            allowed=count <= max_requests,
            remaining=max(0, max_requests - count),
            reset_in=reset_in,
        )
