"""Cache stores — in-memory stub and Redis implementation of CacheStore.

InMemoryCacheStore is the development stub: a dict with lazily enforced
expiry. Values are stored JSON-encoded so callers get a fresh copy on
every read, exactly as they would from a networked cache — nothing leaks
between writer and reader through shared mutable objects.

RedisCacheStore is the production store. It is the piece that makes the
submit/poll contract work across process instances. Cache reads and writes
are best effort: a Redis outage degrades get() to a miss and set() to a
no-op. Counter operations raise CacheError so rate limiting can decide
its own failure policy.

Usage:
    from skillforged.hooks.cache import InMemoryCacheStore, RedisCacheStore

    cache = InMemoryCacheStore()
    await cache.set("job:123", {"status": "starting"}, 3600)
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from skillforged.hooks.interfaces import CacheStore

logger = logging.getLogger("skillforged.cache")


class CacheError(Exception):
    """A cache operation that callers cannot silently degrade failed."""


class InMemoryCacheStore(CacheStore):
    """STUB — dict-backed cache, process-local, loses data on restart.

    Entries are (json_text, expires_at) pairs. Expired entries are deleted
    on access; there is no background sweeper.

    Args:
        clock: Monotonic time source in seconds. Injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float | None]] = {}

    def _live_entry(self, key: str) -> tuple[str, float | None] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Any | None:
        entry = self._live_entry(key)
        if entry is None:
            return None
        return json.loads(entry[0])

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = (json.dumps(value), self._clock() + ttl_seconds)

    async def increment(self, key: str, ttl_seconds: int) -> int:
        entry = self._live_entry(key)
        if entry is None:
            self._entries[key] = ("1", self._clock() + ttl_seconds)
            return 1
        count = int(json.loads(entry[0])) + 1
        self._entries[key] = (str(count), entry[1])
        return count

    async def ttl(self, key: str) -> int:
        entry = self._live_entry(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return max(0, round(entry[1] - self._clock()))

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)


class RedisCacheStore(CacheStore):
    """Redis-backed cache shared by every process instance.

    Supports plain ``redis://`` and TLS ``rediss://`` URLs (Upstash and
    similar hosted Redis).

    Args:
        url: Redis connection URL.
        client: Pre-built client, for tests. Overrides url.
    """

    def __init__(self, url: str = "", client: aioredis.Redis | None = None) -> None:
        if client is None:
            client = aioredis.Redis.from_url(url, decode_responses=True)
        self._client = client

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except RedisError:
            logger.warning("Redis get failed for %s", key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding non-JSON cache value for %s", key)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            await self._client.setex(key, ttl_seconds, json.dumps(value))
        except RedisError:
            logger.warning("Redis set failed for %s", key, exc_info=True)

    async def increment(self, key: str, ttl_seconds: int) -> int:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.ttl(key)
                count, current_ttl = await pipe.execute()
            # First increment creates the key without expiry.
            if current_ttl == -1:
                await self._client.expire(key, ttl_seconds)
        except RedisError as exc:
            raise CacheError(f"increment failed for {key}") from exc
        return int(count)

    async def ttl(self, key: str) -> int:
        try:
            return int(await self._client.ttl(key))
        except RedisError as exc:
            raise CacheError(f"ttl failed for {key}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError:
            logger.warning("Redis delete failed for %s", key, exc_info=True)

    async def close(self) -> None:
        """Closes the connection pool."""
        await self._client.aclose()
