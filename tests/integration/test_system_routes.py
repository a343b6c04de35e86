"""Integration tests for ``/health``, ``/extractors`` and ``/metrics``."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from philomena_scraper.core.cache import ResultCache


@pytest.mark.asyncio
class TestHealth:
    async def test_health_ok_without_cache(self, app_client) -> None:
        async with app_client() as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_health_reports_cache_state(self, app_client) -> None:
        cache = AsyncMock(spec=ResultCache)
        cache.ping.return_value = False
        async with app_client() as client:
            client.app.state.result_cache = cache
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "cache": "error"}

    async def test_health_ignores_origin_policy(self, app_client) -> None:
        async with app_client(ALLOWED_ORIGINS='["https://derpibooru.org"]') as client:
            response = await client.get("/health", headers={"Origin": "https://evil.example"})

        assert response.status_code == 200


@pytest.mark.asyncio
async def test_extractors_listed_in_priority_order(app_client) -> None:
    async with app_client() as client:
        response = await client.get("/extractors")

    assert response.status_code == 200
    body = response.json()
    assert [entry["name"] for entry in body] == [
        "twitter",
        "nitter",
        "deviantart",
        "philomena",
        "buzzly",
        "tumblr",
        "raw",
    ]
    assert body[0]["failure_label"] == "Twitter parser failed"


@pytest.mark.asyncio
class TestMetrics:
    async def test_metrics_exposes_scrape_counters(self, app_client) -> None:
        async with app_client() as client:
            await client.post("/images/scrape", json={"url": "https://example.com/a.png"})
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'scrape_requests_total{extractor="raw",outcome="success"}' in response.text
        assert 'http_requests_total{method="POST"' in response.text

    async def test_metrics_can_be_disabled(self, app_client) -> None:
        async with app_client(METRICS_ENABLED="false") as client:
            response = await client.get("/metrics")

        assert response.status_code == 404
