"""System route handlers.

``GET /health``
    Liveness check.  Always HTTP 200 with ``{"status": "ok"}``; when the
    result cache is enabled a ``cache`` field reports whether Redis answers
    ``PING``.

``GET /extractors``
    The extractor registry in classification order.

These endpoints are diagnostic and must never raise HTTP 5xx errors.
"""

from __future__ import annotations

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from philomena_scraper.api.dependencies import get_registry, get_result_cache
from philomena_scraper.core.cache import ResultCache
from philomena_scraper.core.schemas import ExtractorRead
from philomena_scraper.extractors.registry import ExtractorRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/health")
async def health(
    cache: Annotated[Optional[ResultCache], Depends(get_result_cache)],
) -> JSONResponse:
    """Return process liveness and, when configured, cache reachability."""
    body = {"status": "ok"}
    if cache is not None:
        body["cache"] = "ok" if await cache.ping() else "error"
    return JSONResponse(body)


@router.get("/extractors", response_model=List[ExtractorRead])
async def list_extractors(
    registry: Annotated[ExtractorRegistry, Depends(get_registry)],
) -> list[dict[str, object]]:
    """List the registered extractors, highest priority (lowest number) first."""
    return registry.describe()
