"""Unit tests for the shared upstream HTTP fetcher.

Covers status translation, retry policy (GET/HEAD once, never POST, never
after a timeout), JSON decoding errors, ``head_ok`` and proxy validation,
using respx-mocked httpx responses.
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from philomena_scraper.core.exceptions import (
    FetchTimeoutError,
    UpstreamHttpError,
    UpstreamNetworkError,
    UpstreamParseError,
)
from philomena_scraper.fetcher.config import USER_AGENT
from philomena_scraper.fetcher.http_fetcher import HttpFetcher, build_client


# ---------------------------------------------------------------------------
# build_client
# ---------------------------------------------------------------------------


class TestBuildClient:
    def test_rejects_unknown_proxy_scheme(self) -> None:
        with pytest.raises(ValueError, match="ftp"):
            build_client(proxy="ftp://proxy.example.com:21")

    @pytest.mark.asyncio
    async def test_sends_fixed_user_agent_and_does_not_follow_redirects(self) -> None:
        client = build_client()
        try:
            assert client.headers["User-Agent"] == USER_AGENT
            assert client.follow_redirects is False
            assert client.timeout.connect == 2.5
            assert client.timeout.read == 5.0
        finally:
            await client.aclose()


# ---------------------------------------------------------------------------
# fetch()
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestFetch:
    async def test_successful_get_returns_response(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/post").mock(return_value=httpx.Response(200, text="hello"))
            response = await fetcher.fetch("https://example.com/post")

        assert response.status_code == 200
        assert response.text == "hello"

    async def test_non_2xx_raises_with_status_message(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/api").mock(return_value=httpx.Response(500))
            with pytest.raises(UpstreamHttpError) as exc_info:
                await fetcher.fetch("https://example.com/api", status_message="API request is not 200 code")

        assert exc_info.value.status == 500
        assert exc_info.value.path == ["API request is not 200 code"]

    async def test_non_2xx_default_message_names_status(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/missing").mock(return_value=httpx.Response(404))
            with pytest.raises(UpstreamHttpError) as exc_info:
                await fetcher.fetch("https://example.com/missing")

        assert exc_info.value.path == ["upstream returned HTTP 404"]

    async def test_allow_status_returns_redirect(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="http://legacy.example.com") as mock:
            mock.get("/file.png").mock(
                return_value=httpx.Response(302, headers={"Location": "https://cdn.example.com/file.png"})
            )
            response = await fetcher.fetch("http://legacy.example.com/file.png", allow_status={302})

        assert response.headers["location"] == "https://cdn.example.com/file.png"

    async def test_get_retried_once_after_transport_error(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            route = mock.get("/flaky").mock(
                side_effect=[httpx.ConnectError("reset"), httpx.Response(200, text="ok")]
            )
            response = await fetcher.fetch("https://example.com/flaky")

        assert response.text == "ok"
        assert route.call_count == 2

    async def test_get_gives_up_after_one_retry(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            route = mock.get("/down").mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(UpstreamNetworkError) as exc_info:
                await fetcher.fetch("https://example.com/down")

        assert route.call_count == 2
        assert exc_info.value.path == ["could not reach example.com"]

    async def test_post_is_never_retried(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            route = mock.post("/graphql").mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(UpstreamNetworkError):
                await fetcher.fetch("https://example.com/graphql", method="POST", json={})

        assert route.call_count == 1

    async def test_timeout_is_not_retried(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            route = mock.get("/slow").mock(side_effect=httpx.ReadTimeout("slow"))
            with pytest.raises(FetchTimeoutError) as exc_info:
                await fetcher.fetch("https://example.com/slow")

        assert route.call_count == 1
        assert exc_info.value.path == ["request to example.com timed out"]


# ---------------------------------------------------------------------------
# Convenience wrappers
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestHelpers:
    async def test_get_json_decodes_body(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/api").mock(return_value=httpx.Response(200, json={"ok": True}))
            data = await fetcher.get_json("https://example.com/api")

        assert data == {"ok": True}

    async def test_get_json_rejects_non_json(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/api").mock(return_value=httpx.Response(200, text="<html>"))
            with pytest.raises(UpstreamParseError) as exc_info:
                await fetcher.get_json("https://example.com/api")

        assert exc_info.value.path == ["response is not valid json"]

    async def test_post_json_sends_payload(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://example.com") as mock:
            route = mock.post("/graphql").mock(return_value=httpx.Response(200, json={"data": {}}))
            data = await fetcher.post_json("https://example.com/graphql", {"query": "{ x }"})

        assert data == {"data": {}}
        assert json.loads(route.calls.last.request.content) == {"query": "{ x }"}

    async def test_head_ok_true_on_200(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://cdn.example.com") as mock:
            mock.head("/a.png").mock(return_value=httpx.Response(200))
            assert await fetcher.head_ok("https://cdn.example.com/a.png") is True

    async def test_head_ok_false_on_404(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://cdn.example.com") as mock:
            mock.head("/a.png").mock(return_value=httpx.Response(404))
            assert await fetcher.head_ok("https://cdn.example.com/a.png") is False

    async def test_head_ok_false_on_other_2xx(self, fetcher: HttpFetcher) -> None:
        with respx.mock(base_url="https://cdn.example.com") as mock:
            mock.head("/a.png").mock(return_value=httpx.Response(204))
            assert await fetcher.head_ok("https://cdn.example.com/a.png") is False
