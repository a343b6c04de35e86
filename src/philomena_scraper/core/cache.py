"""Redis-backed cache of successful scrape results.

Results are stored as JSON under ``scrape:<sha256(url)>`` with a fixed
TTL.  Only successes are cached; failures are retried on the next request.

The cache is an optimisation: every Redis error is logged and treated as a
miss (on read) or skipped (on write), so an unavailable Redis never fails a
scrape.
"""

from __future__ import annotations

import hashlib
import json
import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from philomena_scraper.core.models import ScrapeResult

logger = logging.getLogger(__name__)

KEY_PREFIX = "scrape:"


def cache_key(url: str) -> str:
    """Return the Redis key for a normalized scrape URL."""
    return KEY_PREFIX + hashlib.sha256(url.encode("utf-8")).hexdigest()


class ResultCache:
    """Async result cache on top of a ``redis.asyncio.Redis`` client.

    Args:
        client: The Redis client.  Owned by the cache and closed by
            :meth:`aclose`.
        ttl_seconds: Lifetime of a cached result.
    """

    def __init__(self, client: aioredis.Redis, ttl_seconds: int) -> None:
        self._client = client
        self._ttl = ttl_seconds

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int) -> ResultCache:
        """Create a cache connected to the Redis instance at *url*."""
        client: aioredis.Redis = aioredis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        return cls(client, ttl_seconds)

    async def get(self, url: str) -> ScrapeResult | None:
        """Return the cached result for *url*, or ``None``."""
        try:
            raw = await self._client.get(cache_key(url))
        except RedisError:
            logger.warning("cache: read failed for %s", url, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return ScrapeResult.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError):
            logger.warning("cache: discarding malformed entry for %s", url)
            return None

    async def set(self, url: str, result: ScrapeResult) -> None:
        """Store *result* for *url*."""
        try:
            await self._client.set(
                cache_key(url),
                json.dumps(result.to_dict()),
                ex=self._ttl,
            )
        except RedisError:
            logger.warning("cache: write failed for %s", url, exc_info=True)

    async def ping(self) -> bool:
        """Return ``True`` if Redis answers ``PING``."""
        try:
            return bool(await self._client.ping())
        except RedisError:
            logger.exception("cache: Redis unreachable")
            return False

    async def aclose(self) -> None:
        await self._client.aclose()
