"""Shared pytest fixtures for Philomena scraper tests.

Fixture summary
---------------
fetcher         — HttpFetcher over a fresh pooled client (mock it with respx).
scrape_context  — ScrapeContext with camo disabled and no credentials.
make_context    — Factory for ScrapeContext with custom credentials / camo.
load_fixture    — Reads a recorded upstream response from tests/fixtures.
app_client      — Factory yielding an httpx.AsyncClient bound to a freshly
                  built FastAPI app for a given environment.

No test needs network access or Redis: upstream HTTP is mocked with respx
and the result cache is replaced with ``AsyncMock`` where it is exercised.
"""

from __future__ import annotations

import json
import os
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Settings are read from the environment and an optional .env file.  Pin the
# values that change behaviour so a developer's local configuration cannot
# leak into the test run.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "ALLOWED_ORIGINS": "[]",
    "ALLOW_EMPTY_ORIGIN": "true",
    "ENABLE_GET_REQUEST": "true",
    "METRICS_ENABLED": "true",
    "DEVIANTART_LEGACY_HIRES": "true",
    "LOG_LEVEL": "WARNING",
}
_TEST_ENV_UNSET: tuple[str, ...] = (
    "TUMBLR_API_KEY",
    "TWITTER_BEARER_TOKEN",
    "CAMO_KEY",
    "CAMO_HOST",
    "RESULT_CACHE_URL",
    "PREFERRED_NITTER_INSTANCE_HOST",
    "HTTP_PROXY",
    "http_proxy",
)

for _key, _default in _TEST_ENV_DEFAULTS.items():
    os.environ[_key] = _default
for _key in _TEST_ENV_UNSET:
    os.environ.pop(_key, None)

# ---------------------------------------------------------------------------
# Application imports (after env bootstrap)
# ---------------------------------------------------------------------------

from philomena_scraper.config.settings import get_settings  # noqa: E402
from philomena_scraper.core.camo import CamoSigner  # noqa: E402
from philomena_scraper.extractors.base import Credentials, ScrapeContext  # noqa: E402
from philomena_scraper.fetcher.http_fetcher import HttpFetcher, build_client  # noqa: E402

# Clear the lru_cache so Settings() re-reads from the patched environment.
get_settings.cache_clear()

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "api_responses"


# ---------------------------------------------------------------------------
# Recorded upstream responses
# ---------------------------------------------------------------------------


@pytest.fixture
def load_fixture() -> Callable[[str], Any]:
    """Return a loader for ``tests/fixtures/api_responses/<relative path>``.

    ``.json`` files are decoded; anything else is returned as text.
    """

    def _load(relative: str) -> Any:
        text = (FIXTURES_DIR / relative).read_text(encoding="utf-8")
        if relative.endswith(".json"):
            return json.loads(text)
        return text

    return _load


# ---------------------------------------------------------------------------
# Fetcher and scrape context
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def fetcher() -> AsyncGenerator[HttpFetcher, None]:
    """Yield an ``HttpFetcher`` and close its client on teardown."""
    instance = HttpFetcher(build_client())
    try:
        yield instance
    finally:
        await instance.aclose()


@pytest.fixture
def make_context(fetcher: HttpFetcher) -> Callable[..., ScrapeContext]:
    """Return a factory for ``ScrapeContext`` objects sharing ``fetcher``."""

    def _make(
        *,
        tumblr_api_key: str | None = None,
        twitter_bearer_token: str | None = None,
        camo_key: str | None = None,
        camo_host: str | None = None,
    ) -> ScrapeContext:
        return ScrapeContext(
            fetcher=fetcher,
            credentials=Credentials(
                tumblr_api_key=tumblr_api_key,
                twitter_bearer_token=twitter_bearer_token,
            ),
            camo=CamoSigner(camo_key, camo_host),
        )

    return _make


@pytest.fixture
def scrape_context(make_context: Callable[..., ScrapeContext]) -> ScrapeContext:
    """A context without credentials and with camo disabled."""
    return make_context()


# ---------------------------------------------------------------------------
# FastAPI application client
# ---------------------------------------------------------------------------


@pytest.fixture
def app_client(monkeypatch: pytest.MonkeyPatch):
    """Return an async context manager factory for app clients.

    Usage::

        async with app_client(ENABLE_GET_REQUEST="false") as client:
            response = await client.get("/images/scrape", params={"url": u})

    The given environment variables are applied before the app is built.
    Startup and shutdown handlers are run explicitly because
    ``ASGITransport`` does not send lifespan events.
    """

    @asynccontextmanager
    async def _client(**env: str) -> AsyncGenerator[AsyncClient, None]:
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()

        from philomena_scraper.api.main import create_app  # noqa: PLC0415

        application = create_app()
        for handler in application.router.on_startup:
            await handler()
        try:
            async with AsyncClient(
                transport=ASGITransport(app=application),
                base_url="http://testserver",
            ) as client:
                client.app = application  # type: ignore[attr-defined]
                yield client
        finally:
            for handler in application.router.on_shutdown:
                await handler()
            get_settings.cache_clear()

    return _client
