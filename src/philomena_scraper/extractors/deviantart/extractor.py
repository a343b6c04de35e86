"""DeviantArt extractor.

Scrapes the deviation page for its preloaded image, canonical link and
artist, then appends higher-resolution variants of the same image:

1. the ``q_100`` rewrite of a resized JPEG preview,
2. the CDN ``intermediary`` object when a ``HEAD`` probe answers 200,
3. the redirect target of the legacy ``orig01.deviantart.net`` endpoint,
   derived from the base-36 deviation serial (``DEVIANTART_LEGACY_HIRES``).

Every variant reuses the camo URL of the preloaded image.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from philomena_scraper.core.exceptions import UpstreamError, UpstreamParseError
from philomena_scraper.core.models import ImageRef, ScrapeResult
from philomena_scraper.extractors.base import Extractor, ScrapeContext, Step, TargetUrl
from philomena_scraper.extractors.deviantart.config import (
    ARTIST_RE,
    CDN_INTERMEDIARY_RE,
    IMAGE_RE,
    INTERMEDIARY_URL,
    JPG_MAX_QUALITY,
    JPG_QUALITY_RE,
    LEGACY_HIRES_URL,
    REDIRECT_STATUSES,
    SERIAL_RE,
    SOURCE_RE,
)

logger = logging.getLogger(__name__)

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class _Deviation:
    source_url: str
    artist: str
    camo_url: str
    images: tuple[ImageRef, ...]


class DeviantArtExtractor(Extractor):
    """Scrapes a DeviantArt deviation page.

    Args:
        legacy_hires: Probe the legacy original-file endpoint.
    """

    name = "deviantart"
    failure_label = "DeviantArt parser failed"
    priority = 30

    def __init__(self, legacy_hires: bool = True) -> None:
        self._legacy_hires = legacy_hires

    def matches(self, target: TargetUrl) -> bool:
        host = target.host.lower()
        return host == "deviantart.com" or host.endswith(".deviantart.com")

    def steps(self) -> list[Step]:
        steps = [
            Step("image request failed", self._fetch_page),
            Step("could not extract DA page data", self._extract_page),
            Step("could not find hires variants", self._add_cdn_variants),
        ]
        if self._legacy_hires:
            steps.append(Step("old_hires conversion failed", self._add_legacy_hires))
        steps.append(Step("could not build result", self._build_result))
        return steps

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    async def _fetch_page(self, target: TargetUrl, context: ScrapeContext) -> str:
        return await context.fetcher.get_text(target.text, follow_redirects=True)

    async def _extract_page(self, body: str, context: ScrapeContext) -> _Deviation:
        image = IMAGE_RE.search(body)
        if image is None:
            raise UpstreamParseError("no image found")
        source = SOURCE_RE.search(body)
        if source is None:
            raise UpstreamParseError("no source found")
        artist = ARTIST_RE.search(source.group(1))
        if artist is None:
            raise UpstreamParseError("no artist found")

        image_url = _unescape_attr(image.group(1))
        logger.debug(
            "deviantart: image=%s source=%s artist=%s",
            image_url,
            source.group(1),
            artist.group(1),
        )
        camo_url = context.camo.sign(image_url)
        return _Deviation(
            source_url=_unescape_attr(source.group(1)),
            artist=artist.group(1),
            camo_url=camo_url,
            images=(ImageRef(url=image_url, camo_url=camo_url),),
        )

    async def _add_cdn_variants(self, deviation: _Deviation, context: ScrapeContext) -> _Deviation:
        images = list(deviation.images)

        for image in deviation.images:
            if JPG_QUALITY_RE.match(image.url):
                hires = JPG_QUALITY_RE.sub(rf"\g<1>{JPG_MAX_QUALITY}\g<3>", image.url, count=1)
                images.append(ImageRef(url=hires, camo_url=deviation.camo_url))

        probed: set[str] = set()
        for image in list(images):
            match = CDN_INTERMEDIARY_RE.match(image.url)
            if match is None:
                continue
            origin, uuid, name = match.groups()
            candidate = INTERMEDIARY_URL.format(origin=origin, uuid=uuid, name=name)
            if candidate in probed:
                continue
            probed.add(candidate)
            if await context.fetcher.head_ok(candidate):
                images.append(ImageRef(url=candidate, camo_url=deviation.camo_url))

        return replace(deviation, images=tuple(images))

    async def _add_legacy_hires(self, deviation: _Deviation, context: ScrapeContext) -> _Deviation:
        serial = SERIAL_RE.search(deviation.source_url)
        if serial is None:
            raise UpstreamParseError("no serial captured")
        legacy_url = LEGACY_HIRES_URL.format(serial36=to_base36(int(serial.group(1))))

        try:
            response = await context.fetcher.fetch(legacy_url, allow_status=REDIRECT_STATUSES)
        except UpstreamError as exc:
            logger.warning("deviantart: legacy hires probe %s failed: %s", legacy_url, exc)
            return deviation

        location = response.headers.get("location")
        if not location:
            return deviation
        if not location.startswith(("http://", "https://")):
            raise UpstreamParseError("new old_hires location is not valid URL")
        return replace(
            deviation,
            images=deviation.images + (ImageRef(url=location, camo_url=deviation.camo_url),),
        )

    async def _build_result(self, deviation: _Deviation, context: ScrapeContext) -> ScrapeResult:
        return ScrapeResult(
            source_url=deviation.source_url,
            author_name=deviation.artist,
            description="",
            images=deviation.images,
        )


def to_base36(value: int) -> str:
    """Format a non-negative integer in lower-case base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def _unescape_attr(value: str) -> str:
    # Preload hrefs carry HTML-escaped query separators.
    return value.replace("&amp;", "&")
