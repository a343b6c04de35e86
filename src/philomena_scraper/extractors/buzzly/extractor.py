"""Buzzly.Art extractor.

Looks up a submission through Buzzly's public GraphQL API.  Buzzly is the
only platform that reports tags; they are returned as ``additional_tags``
together with an ``artist:<username>`` tag.
"""

from __future__ import annotations

import logging
from typing import Any

from philomena_scraper.core.exceptions import UpstreamParseError
from philomena_scraper.core.models import ImageRef, ScrapeResult
from philomena_scraper.extractors.base import Extractor, ScrapeContext, Step, TargetUrl
from philomena_scraper.extractors.buzzly.config import (
    GET_SUBMISSION_QUERY,
    GRAPHQL_URL,
    OPERATION_NAME,
    REQUEST_HEADERS,
    SUBMISSION_URL_RE,
    SUBMISSIONS_BASE_URL,
)

logger = logging.getLogger(__name__)


class BuzzlyExtractor(Extractor):
    """Scrapes a Buzzly.Art submission."""

    name = "buzzly"
    failure_label = "Buzzly parser failed"
    priority = 50

    def matches(self, target: TargetUrl) -> bool:
        return SUBMISSION_URL_RE.match(str(target.parsed)) is not None

    def steps(self) -> list[Step]:
        return [
            Step("buzzly request failed", self._query_submission),
            Step("could not parse buzzly response", self._parse_submission),
        ]

    async def _query_submission(
        self, target: TargetUrl, context: ScrapeContext
    ) -> tuple[TargetUrl, Any]:
        match = SUBMISSION_URL_RE.match(str(target.parsed))
        if match is None:
            raise UpstreamParseError("URL is not a buzzly submission")
        username, slug = match.group(1), match.group(2)
        logger.debug("buzzly: querying submission %s/%s", username, slug)
        payload = {
            "operationName": OPERATION_NAME,
            "query": GET_SUBMISSION_QUERY,
            "variables": {"username": username, "slug": slug},
        }
        data = await context.fetcher.post_json(GRAPHQL_URL, payload, headers=REQUEST_HEADERS)
        return target, data

    async def _parse_submission(
        self, fetched: tuple[TargetUrl, Any], context: ScrapeContext
    ) -> ScrapeResult:
        target, body = fetched
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise UpstreamParseError("missing response data")

        lookup = data.get("fetchSubmissionByUsernameAndSlug")
        if not isinstance(lookup, dict):
            raise UpstreamParseError("missing data in response")
        submission = lookup.get("submission")
        if not isinstance(submission, dict):
            raise UpstreamParseError("missing submission metadata")
        account = submission.get("account")
        if not isinstance(account, dict):
            raise UpstreamParseError("missing account metadata")

        path = submission.get("path")
        thumbnail_path = submission.get("thumbnailPath")
        if not path or not thumbnail_path:
            raise UpstreamParseError("missing image path")
        tags = submission.get("tags")
        if not isinstance(tags, list):
            raise UpstreamParseError("missing tags fields")

        author = account.get("username") or ""
        additional_tags = [tag for tag in tags if tag is not None]
        additional_tags.append(f"artist:{author}")

        thumbnail_url = f"{SUBMISSIONS_BASE_URL}{thumbnail_path}"
        return ScrapeResult(
            source_url=target.text,
            author_name=author,
            description=submission.get("description") or "",
            images=(
                ImageRef(
                    url=f"{SUBMISSIONS_BASE_URL}{path}",
                    camo_url=context.camo.sign(thumbnail_url),
                ),
            ),
            additional_tags=tuple(additional_tags),
        )
