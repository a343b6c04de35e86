"""Shared upstream HTTP fetcher.

Wraps one pooled :class:`httpx.AsyncClient` for the whole process.  Every
extractor performs its network I/O through :class:`HttpFetcher`, which:

1. applies the per-call deadline (total + connect) from settings,
2. retries GET/HEAD once after a transient transport failure (never after a
   timeout or an HTTP status),
3. translates non-2xx statuses, timeouts and transport faults into the
   :mod:`philomena_scraper.core.exceptions` hierarchy so that each failure
   becomes a leaf frame of the scrape error path.

Responses are read completely inside :meth:`HttpFetcher.fetch`, so the
connection is back in the pool (or closed) before the caller sees the
response.  Cancellation of the calling task propagates ``CancelledError``
out of httpx, which releases the connection.
"""

from __future__ import annotations

import logging
from collections.abc import Container, Mapping
from typing import Any

import httpx

from philomena_scraper.api.metrics import upstream_requests_total
from philomena_scraper.core.exceptions import (
    FetchTimeoutError,
    UpstreamHttpError,
    UpstreamNetworkError,
    UpstreamParseError,
)
from philomena_scraper.fetcher.config import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_TIMEOUT,
    IDEMPOTENT_METHODS,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
    MAX_RETRIES,
    PROXY_SCHEMES,
    USER_AGENT,
)

logger = logging.getLogger(__name__)


def build_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    proxy: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the pooled client shared by all extractors.

    Args:
        timeout: Total deadline per request in seconds.
        connect_timeout: Connect deadline per request in seconds.
        proxy: Optional proxy URL (``http``, ``https`` or ``socks5``).
        transport: Optional transport override (tests).

    Returns:
        A configured :class:`httpx.AsyncClient`.  Redirects are not followed
        unless a call asks for it.

    Raises:
        ValueError: If *proxy* uses an unsupported scheme.
    """
    if proxy is not None:
        scheme = httpx.URL(proxy).scheme
        if scheme not in PROXY_SCHEMES:
            raise ValueError(
                f"unknown client proxy protocol '{scheme}', "
                "specify http, https or socks5"
            )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=connect_timeout),
        limits=httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
        ),
        headers={"User-Agent": USER_AGENT},
        follow_redirects=False,
        proxy=proxy,
        transport=transport,
    )


class HttpFetcher:
    """Connection-pooled upstream HTTP capability with error translation.

    Safe for concurrent use by any number of in-flight scrapes; it holds no
    per-request state.

    Args:
        client: The shared :class:`httpx.AsyncClient`.
        max_retries: Retries after a transient transport error for
            idempotent methods.
    """

    def __init__(self, client: httpx.AsyncClient, *, max_retries: int = MAX_RETRIES) -> None:
        self._client = client
        self._max_retries = max_retries

    async def aclose(self) -> None:
        """Close the underlying client and its pooled connections."""
        await self._client.aclose()

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        follow_redirects: bool = False,
        allow_status: Container[int] = (),
        status_message: str | None = None,
    ) -> httpx.Response:
        """Perform one upstream request.

        Args:
            url: Absolute upstream URL.
            method: HTTP method.
            headers: Extra request headers.
            params: Query parameters.
            json: JSON body.
            follow_redirects: Follow 3xx responses.
            allow_status: Non-2xx statuses returned to the caller instead of
                raised (e.g. ``{301, 302}`` when reading a ``Location``).
            status_message: Leaf error frame used when the status is rejected.

        Returns:
            The fully read :class:`httpx.Response`.

        Raises:
            UpstreamHttpError: On a non-2xx status not in *allow_status*.
            FetchTimeoutError: When the deadline is exceeded.
            UpstreamNetworkError: When the upstream cannot be reached.
        """
        method = method.upper()
        attempts = 1 + (self._max_retries if method in IDEMPOTENT_METHODS else 0)
        host = httpx.URL(url).host

        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    json=json,
                    follow_redirects=follow_redirects,
                )
                break
            except httpx.TimeoutException as exc:
                upstream_requests_total.labels(method=method, outcome="timeout").inc()
                logger.warning("fetcher: timeout %s %s", method, url)
                raise FetchTimeoutError(f"request to {host} timed out", url=url) from exc
            except httpx.TransportError as exc:
                if attempt < attempts:
                    upstream_requests_total.labels(method=method, outcome="retried").inc()
                    logger.info(
                        "fetcher: transport error %s %s (%s), retrying",
                        method,
                        url,
                        type(exc).__name__,
                    )
                    continue
                upstream_requests_total.labels(method=method, outcome="network_error").inc()
                logger.warning("fetcher: transport error %s %s: %r", method, url, exc)
                raise UpstreamNetworkError(f"could not reach {host}", url=url) from exc
            except httpx.RequestError as exc:
                # TooManyRedirects, DecodingError and friends: not transient.
                upstream_requests_total.labels(method=method, outcome="network_error").inc()
                logger.warning("fetcher: request error %s %s: %r", method, url, exc)
                raise UpstreamNetworkError(f"request to {host} failed", url=url) from exc

        if response.is_success or response.status_code in allow_status:
            upstream_requests_total.labels(method=method, outcome="ok").inc()
            return response

        upstream_requests_total.labels(method=method, outcome="http_error").inc()
        logger.info("fetcher: HTTP %d for %s %s", response.status_code, method, url)
        raise UpstreamHttpError(response.status_code, status_message, url=url)

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------

    async def get_text(self, url: str, **kwargs: Any) -> str:
        """GET *url* and return the decoded body."""
        response = await self.fetch(url, **kwargs)
        return response.text

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        """GET *url* and return the decoded JSON body.

        Raises:
            UpstreamParseError: If the body is not JSON.
        """
        response = await self.fetch(url, **kwargs)
        return _decode_json(response)

    async def post_json(self, url: str, payload: Any = None, **kwargs: Any) -> Any:
        """POST *payload* as JSON to *url* and return the decoded JSON body.

        Raises:
            UpstreamParseError: If the body is not JSON.
        """
        response = await self.fetch(url, method="POST", json=payload, **kwargs)
        return _decode_json(response)

    async def head_ok(self, url: str) -> bool:
        """Return ``True`` if ``HEAD`` *url* answers ``200``.

        Non-2xx statuses return ``False``; timeouts and transport failures
        still raise.
        """
        try:
            response = await self.fetch(url, method="HEAD")
        except UpstreamHttpError as exc:
            logger.debug("fetcher: HEAD %s not ok: %d", url, exc.status)
            return False
        return response.status_code == 200


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamParseError("response is not valid json") from exc
