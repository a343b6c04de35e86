"""Dispatcher: runs the selected extractor under the scrape deadline.

Extractor pipelines convert their own failures into
:class:`~philomena_scraper.core.models.ScrapeFailure` values, so the only
outcome the dispatcher adds is the overall timeout.  Every dispatch records
one ``scrape_finished`` event and the ``scrape_*`` Prometheus metrics.
"""

from __future__ import annotations

import asyncio
import time

import structlog

from philomena_scraper.api.metrics import scrape_duration_seconds, scrape_requests_total
from philomena_scraper.core.models import ScrapeFailure, ScrapeOutcome, ScrapeResult
from philomena_scraper.extractors.base import Extractor, ScrapeContext, TargetUrl

logger = structlog.get_logger(__name__)


async def dispatch(
    extractor: Extractor,
    target: TargetUrl,
    context: ScrapeContext,
    *,
    deadline: float | None = None,
) -> ScrapeOutcome:
    """Run *extractor* against *target*.

    Args:
        extractor: The extractor chosen by the classifier.
        target: The normalized URL.
        context: Shared fetcher, credentials and camo signer.
        deadline: Seconds the whole pipeline may take, or ``None`` for no
            limit beyond the per-request fetch timeouts.

    Returns:
        What the extractor returned, or a timeout failure naming it.
    """
    started = time.perf_counter()
    try:
        outcome = await asyncio.wait_for(extractor.scrape(target, context), timeout=deadline)
    except asyncio.TimeoutError:
        outcome = ScrapeFailure(
            (extractor.failure_label, f"scrape timed out after {deadline:g}s")
        )
        result_label = "timeout"
    else:
        result_label = "success" if isinstance(outcome, ScrapeResult) else "failure"
    elapsed = time.perf_counter() - started

    scrape_requests_total.labels(extractor=extractor.name, outcome=result_label).inc()
    scrape_duration_seconds.labels(extractor=extractor.name).observe(elapsed)

    if isinstance(outcome, ScrapeResult):
        logger.info(
            "scrape_finished",
            extractor=extractor.name,
            outcome=result_label,
            images=len(outcome.images),
            duration_ms=round(elapsed * 1000),
        )
    else:
        logger.info(
            "scrape_finished",
            extractor=extractor.name,
            outcome=result_label,
            errors=list(outcome.path),
            duration_ms=round(elapsed * 1000),
        )
    return outcome
