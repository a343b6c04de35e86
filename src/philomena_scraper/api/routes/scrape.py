"""Scrape route handlers.

``POST /images/scrape``
    JSON body ``{"url": "..."}``.

``GET /images/scrape?url=...``
    Same operation with the URL as a query parameter.  Mounted only when
    ``ENABLE_GET_REQUEST`` is true; otherwise the path answers 405 to GET.

Both return HTTP 200 for every well-formed request: a success body, or
``{"errors": [...]}`` when classification or scraping failed.  Malformed
requests are rejected with 400 by the validation handler in ``main.py``.

If the client disconnects while the scrape is running, the scrape task is
cancelled and no body is produced.
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from philomena_scraper.api.dependencies import get_scrape_service
from philomena_scraper.core.models import ScrapeOutcome
from philomena_scraper.core.normalizer import to_response_body
from philomena_scraper.core.schemas import ScrapeErrorRead, ScrapeRequest, ScrapeResultRead
from philomena_scraper.core.service import ScrapeService

logger = structlog.get_logger(__name__)

DISCONNECT_POLL_INTERVAL = 0.25
"""Seconds between client-disconnect checks while a scrape is in flight."""

CLIENT_CLOSED_REQUEST = 499

_RESPONSES = {
    200: {"model": ScrapeResultRead | ScrapeErrorRead},
    400: {"model": ScrapeErrorRead, "description": "Malformed request"},
}

router = APIRouter(tags=["scrape"])
get_router = APIRouter(tags=["scrape"])


async def _scrape_unless_disconnected(
    request: Request,
    service: ScrapeService,
    url: str,
) -> Optional[ScrapeOutcome]:
    """Run the scrape, cancelling it if the client goes away.

    Returns:
        The outcome, or ``None`` if the client disconnected first.
    """
    task = asyncio.ensure_future(service.scrape(url))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_INTERVAL)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("client_disconnected", url=url)
                task.cancel()
                return None
    except asyncio.CancelledError:
        task.cancel()
        raise


async def _respond(request: Request, service: ScrapeService, url: str) -> Response:
    outcome = await _scrape_unless_disconnected(request, service, url)
    if outcome is None:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    return JSONResponse(to_response_body(outcome))


@router.post("/images/scrape", responses=_RESPONSES)
async def scrape_post(
    request: Request,
    body: ScrapeRequest,
    service: Annotated[ScrapeService, Depends(get_scrape_service)],
) -> Response:
    """Scrape the post URL given in the JSON body."""
    return await _respond(request, service, body.url)


@get_router.get("/images/scrape", responses=_RESPONSES)
async def scrape_get(
    request: Request,
    url: Annotated[str, Query(min_length=1)],
    service: Annotated[ScrapeService, Depends(get_scrape_service)],
) -> Response:
    """Scrape the post URL given in the ``url`` query parameter."""
    return await _respond(request, service, url)
