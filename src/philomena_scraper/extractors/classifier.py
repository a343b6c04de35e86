"""URL classification.

Turns a caller-supplied string into a :class:`TargetUrl` and selects the
single extractor responsible for it:

1. Trim surrounding whitespace.
2. Assume ``https://`` when the string carries no scheme.
3. Parse it; reject unparseable input, non-http(s) schemes and URLs without
   a host with :class:`~philomena_scraper.core.exceptions.InvalidUrlError`.
4. Ask the registry for the first extractor, in priority order, whose
   matcher accepts the URL; raise
   :class:`~philomena_scraper.core.exceptions.NoMatchingScraperError` when
   none does.

Classification does no I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import httpx

from philomena_scraper.core.exceptions import InvalidUrlError, NoMatchingScraperError
from philomena_scraper.extractors.base import Extractor, TargetUrl
from philomena_scraper.extractors.registry import ExtractorRegistry

ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})
SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*://")


@dataclass(frozen=True)
class Classification:
    """A normalized URL and the extractor selected for it."""

    target: TargetUrl
    extractor: Extractor


def normalize_url(raw: str) -> TargetUrl:
    """Trim, complete and parse a submitted URL.

    Args:
        raw: The caller-supplied string.

    Returns:
        The normalized :class:`TargetUrl`.

    Raises:
        InvalidUrlError: If the string is not an absolute http(s) URL.
    """
    text = raw.strip()
    if not text:
        raise InvalidUrlError("empty URL")
    if SCHEME_RE.match(text) is None:
        text = f"https://{text}"
    try:
        parsed = httpx.URL(text)
    except httpx.InvalidURL as exc:
        raise InvalidUrlError(str(exc)) from exc
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidUrlError(f"unsupported scheme '{parsed.scheme}'")
    if not parsed.host:
        raise InvalidUrlError("URL has no host")
    return TargetUrl(text=text, parsed=parsed)


def classify(raw: str, registry: ExtractorRegistry) -> Classification:
    """Select the extractor for *raw*.

    Raises:
        InvalidUrlError: If *raw* cannot be parsed.
        NoMatchingScraperError: If no extractor matches.
    """
    target = normalize_url(raw)
    extractor = registry.select(target)
    if extractor is None:
        raise NoMatchingScraperError()
    return Classification(target=target, extractor=extractor)
