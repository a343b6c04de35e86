"""Application-wide exception hierarchy for the Philomena scraper.

All custom exceptions subclass ``PhilomenaScraperError``.  Every exception
carries a ``path``: the ordered list of human-readable frames that ends up in
the ``errors`` array of a failed scrape response, outermost frame first.

Exceptions never cross an extractor boundary.  The pipeline step runner in
:mod:`philomena_scraper.extractors.base` converts them into
:class:`~philomena_scraper.core.models.ScrapeFailure` values.

Hierarchy::

    PhilomenaScraperError
    ├── InvalidUrlError
    ├── NoMatchingScraperError
    ├── CredentialMissingError   (credential: str)
    ├── UpstreamParseError
    └── UpstreamError
        ├── UpstreamHttpError    (status: int)
        ├── UpstreamNetworkError
        └── FetchTimeoutError
"""

from __future__ import annotations


class PhilomenaScraperError(Exception):
    """Base class for all scraper exceptions.

    Args:
        *frames: Error path frames, outermost first.  At least one is required.
    """

    def __init__(self, *frames: str) -> None:
        if not frames:
            raise ValueError("an error path needs at least one frame")
        super().__init__(frames[-1])
        self.path: list[str] = list(frames)

    def with_context(self, frame: str) -> PhilomenaScraperError:
        """Prepend *frame* to the error path and return ``self``."""
        self.path.insert(0, frame)
        return self


# ---------------------------------------------------------------------------
# Classification exceptions
# ---------------------------------------------------------------------------


class InvalidUrlError(PhilomenaScraperError):
    """Raised when the submitted string cannot be parsed as an http(s) URL."""

    def __init__(self, detail: str) -> None:
        super().__init__("could not parse URL for scraper", detail)


class NoMatchingScraperError(PhilomenaScraperError):
    """Raised when no registered extractor claims a URL."""

    def __init__(self) -> None:
        super().__init__("URL invalid")


# ---------------------------------------------------------------------------
# Credential exceptions
# ---------------------------------------------------------------------------


class CredentialMissingError(PhilomenaScraperError):
    """Raised when a matched platform needs a credential that is not configured.

    Args:
        credential: Human-readable credential name (e.g. ``"Tumblr API key"``).
    """

    def __init__(self, credential: str) -> None:
        super().__init__(f"{credential} is not configured")
        self.credential = credential


# ---------------------------------------------------------------------------
# Upstream exceptions
# ---------------------------------------------------------------------------


class UpstreamParseError(PhilomenaScraperError):
    """Raised when an upstream response does not have the expected shape."""


class UpstreamError(PhilomenaScraperError):
    """Base class for failures raised by the HTTP fetcher.

    Args:
        message: Leaf frame for the error path.
        url: The upstream URL that failed.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class UpstreamHttpError(UpstreamError):
    """Raised when an upstream responds with a non-2xx status.

    Args:
        status: HTTP status code returned by the upstream.
        message: Leaf frame for the error path.  Defaults to
            ``"upstream returned HTTP <status>"``.
        url: The upstream URL.
    """

    def __init__(
        self,
        status: int,
        message: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message or f"upstream returned HTTP {status}", url=url)
        self.status = status


class UpstreamNetworkError(UpstreamError):
    """Raised when the upstream could not be reached (DNS, connect, reset)."""


class FetchTimeoutError(UpstreamError):
    """Raised when an upstream call exceeds its deadline.  Never retried."""
