"""Unit tests for the extractor pipeline runner and the dispatcher."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from philomena_scraper.core.exceptions import UpstreamHttpError, UpstreamParseError
from philomena_scraper.core.models import ScrapeFailure, ScrapeResult
from philomena_scraper.extractors.base import Extractor, Step, TargetUrl, run_pipeline
from philomena_scraper.extractors.dispatcher import dispatch

TARGET = TargetUrl(text="https://example.com/post/1", parsed=httpx.URL("https://example.com/post/1"))


async def _to_text(value, context):
    return str(value)


async def _to_result(value, context):
    return ScrapeResult(source_url=value)


async def _parse_fails(value, context):
    raise UpstreamParseError("no image found")


async def _http_fails(value, context):
    raise UpstreamHttpError(500, "bad status code for page request")


async def _crashes(value, context):
    raise KeyError("boom")


class _SlowExtractor(Extractor):
    name = "slow"
    failure_label = "Slow parser failed"
    priority = 1

    def matches(self, target):
        return True

    def steps(self):
        async def _sleep(value, context):
            await asyncio.sleep(5)
            return ScrapeResult(source_url=value.text)

        return [Step("sleep", _sleep)]


class _FastExtractor(_SlowExtractor):
    name = "fast"

    def steps(self):
        return [Step("to text", _to_text), Step("to result", _to_result)]


@pytest.mark.asyncio
class TestRunPipeline:
    async def test_threads_values_through_steps(self, scrape_context) -> None:
        outcome = await run_pipeline(
            "Example parser failed",
            [Step("to text", _to_text), Step("to result", _to_result)],
            TARGET,
            scrape_context,
        )
        assert outcome == ScrapeResult(source_url="https://example.com/post/1")

    async def test_failure_path_is_label_step_and_leaf(self, scrape_context) -> None:
        outcome = await run_pipeline(
            "Example parser failed",
            [Step("to text", _to_text), Step("could not extract page", _parse_fails)],
            TARGET,
            scrape_context,
        )
        assert outcome == ScrapeFailure(
            ("Example parser failed", "could not extract page", "no image found")
        )

    async def test_stops_at_first_failing_step(self, scrape_context) -> None:
        called = []

        async def _record(value, context):
            called.append(value)
            return value

        outcome = await run_pipeline(
            "Example parser failed",
            [Step("page request failed", _http_fails), Step("never", _record)],
            TARGET,
            scrape_context,
        )
        assert called == []
        assert outcome == ScrapeFailure(
            ("Example parser failed", "page request failed", "bad status code for page request")
        )

    async def test_unexpected_exception_becomes_internal_error(self, scrape_context) -> None:
        outcome = await run_pipeline(
            "Example parser failed", [Step("crashy step", _crashes)], TARGET, scrape_context
        )
        assert outcome == ScrapeFailure(("Example parser failed", "crashy step", "internal error"))

    async def test_pipeline_without_result(self, scrape_context) -> None:
        outcome = await run_pipeline(
            "Example parser failed", [Step("to text", _to_text)], TARGET, scrape_context
        )
        assert outcome == ScrapeFailure(("Example parser failed", "pipeline produced no result"))


@pytest.mark.asyncio
class TestDispatch:
    async def test_returns_extractor_outcome(self, scrape_context) -> None:
        outcome = await dispatch(_FastExtractor(), TARGET, scrape_context, deadline=1.0)
        assert outcome == ScrapeResult(source_url="https://example.com/post/1")

    async def test_deadline_produces_timeout_failure(self, scrape_context) -> None:
        outcome = await dispatch(_SlowExtractor(), TARGET, scrape_context, deadline=0.05)
        assert outcome == ScrapeFailure(("Slow parser failed", "scrape timed out after 0.05s"))

    async def test_no_deadline(self, scrape_context) -> None:
        outcome = await dispatch(_FastExtractor(), TARGET, scrape_context)
        assert isinstance(outcome, ScrapeResult)
