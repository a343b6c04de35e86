"""Scrape service: the single operation behind ``/images/scrape``.

Composes the classifier, the optional result cache and the dispatcher::

    raw URL ─► classify ─► cache lookup ─► dispatch ─► cache store
                  │             │ hit
                  ▼             ▼
           ScrapeFailure   ScrapeResult

Classification errors become failures here; extractor errors are already
failures by the time ``dispatch`` returns.  Nothing raises out of
:meth:`ScrapeService.scrape` except ``asyncio.CancelledError``.
"""

from __future__ import annotations

import structlog

from philomena_scraper.api.metrics import scrape_requests_total
from philomena_scraper.core.cache import ResultCache
from philomena_scraper.core.exceptions import InvalidUrlError, NoMatchingScraperError
from philomena_scraper.core.models import ScrapeFailure, ScrapeOutcome, ScrapeResult
from philomena_scraper.extractors.base import ScrapeContext
from philomena_scraper.extractors.classifier import classify
from philomena_scraper.extractors.dispatcher import dispatch
from philomena_scraper.extractors.registry import ExtractorRegistry

logger = structlog.get_logger(__name__)

_NO_EXTRACTOR = "none"


class ScrapeService:
    """Classifies, scrapes and caches one URL per call.

    Shared by all requests; holds only read-only collaborators.

    Args:
        registry: The extractor registry.
        context: Fetcher, credentials and camo signer handed to extractors.
        cache: Optional result cache.
        scrape_timeout: Deadline for one extractor pipeline, in seconds.
    """

    def __init__(
        self,
        registry: ExtractorRegistry,
        context: ScrapeContext,
        *,
        cache: ResultCache | None = None,
        scrape_timeout: float | None = None,
    ) -> None:
        self.registry = registry
        self.context = context
        self.cache = cache
        self.scrape_timeout = scrape_timeout

    async def scrape(self, raw_url: str) -> ScrapeOutcome:
        """Scrape *raw_url* and return its result or error path."""
        try:
            classification = classify(raw_url, self.registry)
        except InvalidUrlError as exc:
            scrape_requests_total.labels(extractor=_NO_EXTRACTOR, outcome="invalid_url").inc()
            logger.info("scrape_rejected", reason="invalid_url", errors=exc.path)
            return ScrapeFailure(tuple(exc.path))
        except NoMatchingScraperError as exc:
            scrape_requests_total.labels(extractor=_NO_EXTRACTOR, outcome="no_match").inc()
            logger.info("scrape_rejected", reason="no_match", url=raw_url)
            return ScrapeFailure(tuple(exc.path))

        target = classification.target
        extractor = classification.extractor
        logger.debug("scrape_classified", url=target.text, extractor=extractor.name)

        if self.cache is not None:
            cached = await self.cache.get(target.text)
            if cached is not None:
                scrape_requests_total.labels(extractor=extractor.name, outcome="cached").inc()
                logger.info("scrape_cache_hit", url=target.text, extractor=extractor.name)
                return cached

        outcome = await dispatch(
            extractor,
            target,
            self.context,
            deadline=self.scrape_timeout,
        )
        if self.cache is not None and isinstance(outcome, ScrapeResult):
            await self.cache.set(target.text, outcome)
        return outcome
