"""Tumblr extractor.

Handles photo posts and text posts:

- Photo posts: each photo's ``original_size`` URL is upsized by probing the
  size ladder with ``HEAD`` (concurrently, first answering size wins).  The
  400px alt size is used as the camo preview.
- Text posts: the ``<img>`` elements of the post body, in document order.

Other post types fail the scrape.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from bs4 import BeautifulSoup

from philomena_scraper.core.exceptions import CredentialMissingError, UpstreamParseError
from philomena_scraper.core.models import ImageRef, ScrapeFailure, ScrapeOutcome, ScrapeResult
from philomena_scraper.extractors.base import Extractor, ScrapeContext, Step, TargetUrl
from philomena_scraper.extractors.tumblr.config import (
    API_URL,
    HTML_PARSER,
    POST_URL_RE,
    PREVIEW_WIDTH,
    SIZE_RE,
    SIZES,
)

logger = logging.getLogger(__name__)

_CREDENTIAL = "Tumblr API key"


class TumblrExtractor(Extractor):
    """Scrapes Tumblr photo and text posts through the v2 API."""

    name = "tumblr"
    failure_label = "Tumblr parser failed"
    priority = 60

    def matches(self, target: TargetUrl) -> bool:
        return POST_URL_RE.match(str(target.parsed)) is not None

    def steps(self) -> list[Step]:
        return [
            Step("request to tumblr failed", self._fetch_post),
            Step("invalid tumblr response", self._select_post),
            Step("could not process post", self._process_post),
        ]

    async def scrape(self, target: TargetUrl, context: ScrapeContext) -> ScrapeOutcome:
        if not context.credentials.tumblr_api_key:
            exc = CredentialMissingError(_CREDENTIAL)
            logger.warning("tumblr: %s", exc)
            return ScrapeFailure((self.failure_label, *exc.path))
        return await super().scrape(target, context)

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    async def _fetch_post(self, target: TargetUrl, context: ScrapeContext) -> Any:
        match = POST_URL_RE.match(str(target.parsed))
        if match is None:
            raise UpstreamParseError("URL is not a tumblr post")
        api_url = API_URL.format(host=target.host)
        logger.debug("tumblr: requesting post %s from %s", match.group(3), api_url)
        return await context.fetcher.get_json(
            api_url,
            params={"id": match.group(3), "api_key": context.credentials.tumblr_api_key},
            status_message="request to tumblr returned error code",
        )

    async def _select_post(self, data: Any, context: ScrapeContext) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise UpstreamParseError("tumblr response is not an object")
        if (data.get("meta") or {}).get("status") != 200:
            raise UpstreamParseError("tumblr returned non-200 error")
        posts = (data.get("response") or {}).get("posts") or []
        if not posts or not isinstance(posts[0], dict):
            raise UpstreamParseError("tumblr response has no post")
        return posts[0]

    async def _process_post(self, post: dict[str, Any], context: ScrapeContext) -> ScrapeResult:
        post_type = post.get("type")
        if post_type == "photo":
            logger.debug("tumblr: photo post")
            images = await _photo_images(post, context)
        elif post_type == "text":
            logger.debug("tumblr: text post")
            images = _text_images(post, context)
        else:
            raise UpstreamParseError(f"unsupported post type {post_type!r}")

        return ScrapeResult(
            source_url=post.get("post_url") or "",
            author_name=post.get("blog_name") or "",
            description=post.get("summary") or "",
            images=tuple(images),
        )


async def _photo_images(post: dict[str, Any], context: ScrapeContext) -> list[ImageRef]:
    photos = post.get("photos")
    if not isinstance(photos, list):
        raise UpstreamParseError("photo post has no photos")

    images: list[ImageRef] = []
    for photo in photos:
        original = (photo.get("original_size") or {}).get("url")
        if not isinstance(original, str) or not original:
            logger.debug("tumblr: photo without original_size url")
            continue
        image_url = await upsize(original, context)
        if image_url is None:
            logger.debug("tumblr: no size of %s is reachable", original)
            continue
        preview = _preview(photo.get("alt_sizes"), fallback=image_url)
        images.append(ImageRef(url=image_url, camo_url=context.camo.sign(preview)))
    return images


def _text_images(post: dict[str, Any], context: ScrapeContext) -> list[ImageRef]:
    soup = BeautifulSoup(post.get("body") or "", HTML_PARSER)
    images: list[ImageRef] = []
    for img in soup.find_all("img"):
        src = img.get("src")
        if not isinstance(src, str) or not src.startswith(("http://", "https://")):
            continue
        images.append(ImageRef(url=src, camo_url=context.camo.sign(src)))
    return images


async def upsize(image_url: str, context: ScrapeContext) -> str | None:
    """Return the largest existing rendition of *image_url*, or ``None``.

    All candidate sizes are probed concurrently; the result respects the
    ladder order, not completion order.  If any request raises, the remaining
    requests are cancelled and awaited before the error propagates.
    """
    candidates: list[str] = []
    for size in SIZES:
        candidate = SIZE_RE.sub(lambda m, size=size: f"_{size}{m.group(2)}", image_url)
        if candidate not in candidates:
            candidates.append(candidate)

    tasks = [asyncio.create_task(context.fetcher.head_ok(url)) for url in candidates]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    for candidate, ok in zip(candidates, results):
        if ok:
            return candidate
    return None


def _preview(alt_sizes: Any, *, fallback: str) -> str:
    previews = [
        alt["url"]
        for alt in alt_sizes or []
        if isinstance(alt, dict) and alt.get("width") == PREVIEW_WIDTH and alt.get("url")
    ]
    return previews[-1] if previews else fallback
