"""Philomena extractor.

Scrapes an image page on a known Philomena instance (Derpibooru by default)
through the instance's JSON API.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from philomena_scraper.core.exceptions import UpstreamParseError
from philomena_scraper.core.models import ImageRef, ScrapeResult
from philomena_scraper.extractors.base import Extractor, ScrapeContext, Step, TargetUrl
from philomena_scraper.extractors.philomena.config import (
    API_URL,
    ARTIST_TAG_PREFIX,
    IMAGE_PATH_RE,
)

logger = logging.getLogger(__name__)


class PhilomenaExtractor(Extractor):
    """Scrapes images from Philomena boorus.

    Args:
        instances: Hostnames of the Philomena instances to claim.
    """

    name = "philomena"
    failure_label = "Philomena parser failed"
    priority = 40

    def __init__(self, instances: Iterable[str]) -> None:
        self._instances = frozenset(host.lower() for host in instances)

    def matches(self, target: TargetUrl) -> bool:
        return (
            target.parsed.scheme == "https"
            and target.host.lower() in self._instances
            and IMAGE_PATH_RE.match(target.path) is not None
        )

    def steps(self) -> list[Step]:
        return [
            Step("could not build api url", self._api_url),
            Step("philomena request failed", self._fetch_image),
            Step("could not parse philomena", self._parse_image),
        ]

    async def _api_url(self, target: TargetUrl, context: ScrapeContext) -> str:
        match = IMAGE_PATH_RE.match(target.path)
        if match is None:
            raise UpstreamParseError("URL did not match a philomena image")
        return API_URL.format(host=target.host.lower(), image_id=match.group("image_id"))

    async def _fetch_image(self, api_url: str, context: ScrapeContext) -> Any:
        logger.debug("philomena: requesting %s", api_url)
        return await context.fetcher.get_json(
            api_url,
            status_message="philomena returned error code",
        )

    async def _parse_image(self, data: Any, context: ScrapeContext) -> ScrapeResult:
        image = data.get("image") if isinstance(data, dict) else None
        if not isinstance(image, dict):
            raise UpstreamParseError("missing image in api response")
        view_url = image.get("view_url")
        if not isinstance(view_url, str) or not view_url:
            raise UpstreamParseError("missing view_url in api response")

        return ScrapeResult(
            source_url=_blank_to_empty(image.get("source_url")),
            author_name=_artist(image.get("tags") or []),
            description=_blank_to_empty(image.get("description")),
            images=(ImageRef(url=view_url, camo_url=context.camo.sign(view_url)),),
        )


def _artist(tags: list[Any]) -> str:
    for tag in tags:
        if isinstance(tag, str) and tag.startswith(ARTIST_TAG_PREFIX):
            return tag[len(ARTIST_TAG_PREFIX):]
    return ""


def _blank_to_empty(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return ""
    return value
