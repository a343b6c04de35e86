"""FastAPI dependency injection providers.

The scrape service, the extractor registry and the result cache are built
once in the application's startup handler and stored on ``app.state``.
These providers hand them to route handlers so that handlers never reach
into ``app.state`` themselves and tests can override them with
``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, status

from philomena_scraper.core.cache import ResultCache
from philomena_scraper.core.service import ScrapeService
from philomena_scraper.extractors.registry import ExtractorRegistry


def get_scrape_service(request: Request) -> ScrapeService:
    """Return the process-wide :class:`ScrapeService`.

    Raises:
        HTTPException 503: If the application has not finished starting.
    """
    service: Optional[ScrapeService] = getattr(request.app.state, "scrape_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scrape service is not initialised.",
        )
    return service


def get_registry(request: Request) -> ExtractorRegistry:
    """Return the extractor registry of the running scrape service."""
    return get_scrape_service(request).registry


def get_result_cache(request: Request) -> Optional[ResultCache]:
    """Return the result cache, or ``None`` when caching is disabled."""
    return getattr(request.app.state, "result_cache", None)
