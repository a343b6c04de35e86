"""Nitter extractor.

Nitter mirrors render tweets as plain HTML, so no API credentials are
needed.  Only hosts on the configured allow-list are claimed.  When a
preferred instance is configured the page is fetched from it instead of the
submitted host, but image URLs are always rebuilt on the submitted host.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from philomena_scraper.core.exceptions import UpstreamParseError
from philomena_scraper.core.models import ImageRef, ScrapeResult
from philomena_scraper.extractors.base import Extractor, ScrapeContext, Step, TargetUrl
from philomena_scraper.extractors.nitter.config import (
    AUTHOR_SELECTOR,
    DESCRIPTION_SELECTOR,
    HTML_PARSER,
    IMAGE_LINK_SELECTOR,
    IMAGE_SELECTOR,
    SOURCE_SELECTOR,
    TWEET_PATH_RE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _NitterPage:
    target: TargetUrl
    fetch_url: str
    html: str = ""


class NitterExtractor(Extractor):
    """Scrapes tweet photos from an allow-listed Nitter instance.

    Args:
        instances: Hostnames accepted as Nitter instances.
        preferred_host: Instance to fetch pages from, or ``None`` to use the
            submitted host.
    """

    name = "nitter"
    failure_label = "Nitter parser failed"
    priority = 20

    def __init__(self, instances: Iterable[str], preferred_host: str | None = None) -> None:
        self._instances = frozenset(host.lower() for host in instances)
        self._preferred_host = preferred_host or None

    def matches(self, target: TargetUrl) -> bool:
        return (
            target.host.lower() in self._instances
            and TWEET_PATH_RE.match(target.path) is not None
        )

    def steps(self) -> list[Step]:
        return [
            Step("could not set preferred host", self._resolve_fetch_url),
            Step("nitter request failed", self._fetch_page),
            Step("could not parse nitter page", self._parse_page),
        ]

    async def _resolve_fetch_url(self, target: TargetUrl, context: ScrapeContext) -> _NitterPage:
        if self._preferred_host is None:
            return _NitterPage(target=target, fetch_url=target.text)
        try:
            fetch_url = target.parsed.copy_with(host=self._preferred_host)
        except ValueError as exc:
            raise UpstreamParseError(f"invalid preferred host {self._preferred_host!r}") from exc
        return _NitterPage(target=target, fetch_url=str(fetch_url))

    async def _fetch_page(self, page: _NitterPage, context: ScrapeContext) -> _NitterPage:
        logger.debug("nitter: fetching %s", page.fetch_url)
        html = await context.fetcher.get_text(page.fetch_url)
        return _NitterPage(target=page.target, fetch_url=page.fetch_url, html=html)

    async def _parse_page(self, page: _NitterPage, context: ScrapeContext) -> ScrapeResult:
        soup = BeautifulSoup(page.html, HTML_PARSER)

        author = "".join(tag.get_text() for tag in soup.select(AUTHOR_SELECTOR))
        description_tag = soup.select_one(DESCRIPTION_SELECTOR)
        description = description_tag.get_text() if description_tag is not None else ""

        source_tag = soup.select_one(SOURCE_SELECTOR)
        source_url = source_tag.get("href") if source_tag is not None else None
        if not isinstance(source_url, str) or not source_url:
            source_url = page.fetch_url

        images: list[ImageRef] = []
        for index, attachment in enumerate(soup.select(IMAGE_SELECTOR)):
            link = attachment.select_one(IMAGE_LINK_SELECTOR)
            href = link.get("href") if isinstance(link, Tag) else None
            if not isinstance(href, str) or not href:
                logger.debug("nitter: attachment %d has no image link", index)
                continue
            logger.debug("nitter: found image %d: %s", index, href)
            image_url = _rebuild_on_host(page.target, href)
            images.append(ImageRef(url=image_url, camo_url=context.camo.sign(image_url)))

        return ScrapeResult(
            source_url=source_url,
            author_name=author.lstrip("@"),
            description=description,
            images=tuple(images),
        )


def _rebuild_on_host(target: TargetUrl, path: str) -> str:
    """Return *path* on the submitted instance, keeping the submitted query.

    Nitter image paths are already percent-encoded (``/pic/media%2F...``)
    and are used verbatim.
    """
    parsed = target.parsed
    if not path.startswith("/"):
        path = f"/{path}"
    url = f"{parsed.scheme}://{parsed.netloc.decode('ascii')}{path}"
    query = parsed.query.decode("ascii")
    if query:
        url = f"{url}?{query}"
    return url
