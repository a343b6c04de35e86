"""Twitter extractor.

Resolves a tweet permalink to its attached photos through the guest-token
web API flow described in :mod:`.config`.  Only tweet permalinks on
``twitter.com``, ``mobile.twitter.com`` and ``x.com`` are claimed; Nitter
mirrors are handled by :mod:`philomena_scraper.extractors.nitter`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from philomena_scraper.core.exceptions import UpstreamParseError
from philomena_scraper.core.models import ImageRef, ScrapeResult
from philomena_scraper.extractors.base import Extractor, ScrapeContext, Step, TargetUrl
from philomena_scraper.extractors.twitter.config import (
    ACTIVATION_URL,
    BEARER_RE,
    CONVERSATION_API_URL,
    ORIG_SUFFIX,
    PAGE_URL,
    SCRIPT_RE,
    TWEET_URL_RE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TweetState:
    """Data threaded through the Twitter pipeline."""

    user: str
    status_id: str
    page_html: str | None = None
    bearer: str | None = None
    guest_token: str | None = None
    api_response: Any = None

    @property
    def page_url(self) -> str:
        return PAGE_URL.format(user=self.user, status_id=self.status_id)


class TwitterExtractor(Extractor):
    """Scrapes photos attached to a tweet."""

    name = "twitter"
    failure_label = "Twitter parser failed"
    priority = 10

    def matches(self, target: TargetUrl) -> bool:
        return TWEET_URL_RE.match(str(target.parsed)) is not None

    def steps(self) -> list[Step]:
        return [
            Step("could not parse tweet url", self._parse_url),
            Step("initial page request failed", self._fetch_page),
            Step("could not get bearer", self._find_bearer),
            Step("could not get guest token", self._activate_guest),
            Step("invalid api response", self._call_api),
            Step("could not extract tweet media", self._build_result),
        ]

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    async def _parse_url(self, target: TargetUrl, context: ScrapeContext) -> _TweetState:
        match = TWEET_URL_RE.match(str(target.parsed))
        if match is None:
            raise UpstreamParseError("URL is not a tweet permalink")
        return _TweetState(user=match.group(1), status_id=match.group(2))

    async def _fetch_page(self, state: _TweetState, context: ScrapeContext) -> _TweetState:
        configured = context.credentials.twitter_bearer_token
        if configured:
            return replace(state, bearer=configured)
        logger.debug("twitter: fetching page %s", state.page_url)
        html = await context.fetcher.get_text(
            state.page_url,
            follow_redirects=True,
            status_message="bad status code for page request",
        )
        return replace(state, page_html=html)

    async def _find_bearer(self, state: _TweetState, context: ScrapeContext) -> _TweetState:
        if state.bearer:
            return state
        script = SCRIPT_RE.search(state.page_html or "")
        if script is None:
            raise UpstreamParseError("could not get script")
        script_url = script.group(1)
        logger.debug("twitter: client script %s", script_url)
        script_body = await context.fetcher.get_text(
            script_url,
            status_message="bad status for script data request",
        )
        bearer = BEARER_RE.search(script_body)
        if bearer is None:
            raise UpstreamParseError("no bearer token in client script")
        return replace(state, bearer=bearer.group(1))

    async def _activate_guest(self, state: _TweetState, context: ScrapeContext) -> _TweetState:
        data = await context.fetcher.post_json(
            ACTIVATION_URL,
            headers={"Authorization": f"Bearer {state.bearer}"},
            status_message="bad status for GT activation",
        )
        if not isinstance(data, dict) or "guest_token" not in data:
            raise UpstreamParseError("no GT in twitter API response")
        token = data["guest_token"]
        if not isinstance(token, str) or not token:
            raise UpstreamParseError("invalid GT in twitter API response")
        return replace(state, guest_token=token)

    async def _call_api(self, state: _TweetState, context: ScrapeContext) -> _TweetState:
        data = await context.fetcher.get_json(
            CONVERSATION_API_URL.format(status_id=state.status_id),
            params={"tweet_mode": "extended"},
            headers={
                "Authorization": f"Bearer {state.bearer}",
                "x-guest-token": state.guest_token or "",
            },
            status_message="API request is not 200 code",
        )
        return replace(state, api_response=data)

    async def _build_result(self, state: _TweetState, context: ScrapeContext) -> ScrapeResult:
        tweet = _find_tweet(state.api_response, state.status_id)
        images: list[ImageRef] = []
        for media in (tweet.get("entities") or {}).get("media") or []:
            url_orig = media.get("media_url_https") if isinstance(media, dict) else None
            if not url_orig:
                logger.debug("twitter: media entry without media_url_https: %r", media)
                continue
            url_noorig = url_orig.removesuffix(ORIG_SUFFIX)
            images.append(ImageRef(url=url_noorig, camo_url=context.camo.sign(url_orig)))
        if not images:
            raise UpstreamParseError("tweet has no images")

        description = tweet.get("text") or tweet.get("full_text") or ""
        return ScrapeResult(
            source_url=state.page_url,
            author_name=state.user,
            description=description,
            images=tuple(images),
        )


def _find_tweet(api_response: Any, status_id: str) -> dict[str, Any]:
    """Return the tweet object for *status_id* from a conversation response.

    Raises:
        UpstreamParseError: If the response does not contain the tweet.
    """
    try:
        tweet = api_response["globalObjects"]["tweets"][status_id]
    except (KeyError, TypeError) as exc:
        raise UpstreamParseError("tweet missing from api response") from exc
    if not isinstance(tweet, dict):
        raise UpstreamParseError("tweet missing from api response")
    return tweet
