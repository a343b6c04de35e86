"""Unit tests for the Redis result cache.

The Redis client is replaced with an ``AsyncMock``; no Redis server is needed.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from philomena_scraper.core.cache import ResultCache, cache_key
from philomena_scraper.core.models import ImageRef, ScrapeResult

URL = "https://derpibooru.org/images/1426211"
RESULT = ScrapeResult(
    source_url="https://example.com/source",
    author_name="zacatron94",
    description="",
    images=(ImageRef.direct("https://derpicdn.net/img/view/2017/5/1/1426211.png"),),
)


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


def test_cache_key_is_prefixed_digest() -> None:
    key = cache_key(URL)
    assert key.startswith("scrape:")
    assert len(key) == len("scrape:") + 64
    assert cache_key(URL) == key
    assert cache_key(URL + "/") != key


@pytest.mark.asyncio
class TestResultCache:
    async def test_get_hit_decodes_result(self, client: AsyncMock) -> None:
        client.get.return_value = json.dumps(RESULT.to_dict())
        cache = ResultCache(client, ttl_seconds=60)

        assert await cache.get(URL) == RESULT
        client.get.assert_awaited_once_with(cache_key(URL))

    async def test_get_miss(self, client: AsyncMock) -> None:
        client.get.return_value = None
        assert await ResultCache(client, ttl_seconds=60).get(URL) is None

    async def test_get_redis_error_is_a_miss(self, client: AsyncMock) -> None:
        client.get.side_effect = RedisConnectionError("down")
        assert await ResultCache(client, ttl_seconds=60).get(URL) is None

    async def test_get_malformed_entry_is_a_miss(self, client: AsyncMock) -> None:
        client.get.return_value = '{"images": "nope"'
        assert await ResultCache(client, ttl_seconds=60).get(URL) is None

    async def test_set_stores_json_with_ttl(self, client: AsyncMock) -> None:
        await ResultCache(client, ttl_seconds=600).set(URL, RESULT)

        client.set.assert_awaited_once()
        args, kwargs = client.set.call_args
        assert args[0] == cache_key(URL)
        assert json.loads(args[1]) == RESULT.to_dict()
        assert kwargs == {"ex": 600}

    async def test_set_swallows_redis_error(self, client: AsyncMock) -> None:
        client.set.side_effect = RedisConnectionError("down")
        await ResultCache(client, ttl_seconds=60).set(URL, RESULT)

    async def test_ping(self, client: AsyncMock) -> None:
        client.ping.return_value = True
        assert await ResultCache(client, ttl_seconds=60).ping() is True

        client.ping.side_effect = RedisConnectionError("down")
        assert await ResultCache(client, ttl_seconds=60).ping() is False

    async def test_aclose_closes_client(self, client: AsyncMock) -> None:
        await ResultCache(client, ttl_seconds=60).aclose()
        client.aclose.assert_awaited_once()
