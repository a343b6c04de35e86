"""FastAPI application factory and entry point.

Creates the application instance, registers middleware and routers, and
builds the long-lived scrape machinery (HTTP client, extractor registry,
result cache) in the startup handler.

Usage::

    # Development server (from project root)
    uvicorn philomena_scraper.api.main:app --reload

    # Or via the console script
    philomena-scraper
"""

from __future__ import annotations

import time
import uuid
from typing import Callable, Optional

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from philomena_scraper.api.metrics import (
    get_metrics_response,
    http_request_duration_seconds,
    http_requests_total,
)
from philomena_scraper.config.settings import Settings, get_settings
from philomena_scraper.core.cache import ResultCache
from philomena_scraper.core.camo import CamoSigner
from philomena_scraper.core.logging_config import configure_logging, request_id_var
from philomena_scraper.core.normalizer import validation_error_body
from philomena_scraper.core.service import ScrapeService
from philomena_scraper.extractors.base import Credentials, ScrapeContext
from philomena_scraper.extractors.registry import build_registry
from philomena_scraper.fetcher.http_fetcher import HttpFetcher, build_client

# ---------------------------------------------------------------------------
# Logging is configured once at import so that records emitted while the app
# is built are captured.  create_app() re-applies the level from settings.
# ---------------------------------------------------------------------------

configure_logging("INFO")

logger = structlog.get_logger(__name__)

ORIGIN_EXEMPT_PATHS: frozenset[str] = frozenset({"/health", "/metrics"})
"""Paths served regardless of the ``Origin`` header."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_allowed_origin(settings: Settings, origin: Optional[str]) -> bool:
    """Apply the ``ALLOWED_ORIGINS`` / ``ALLOW_EMPTY_ORIGIN`` policy.

    Args:
        settings: Application settings.
        origin: The request's ``Origin`` header, or ``None`` when absent.

    Returns:
        ``True`` if the request may proceed.
    """
    if origin is None:
        return settings.allow_empty_origin
    if not settings.allowed_origins:
        return True
    return origin in settings.allowed_origins


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    # Drop the "body" / "query" location prefix.
    loc = [str(part) for part in first.get("loc", ())[1:]]
    message = first.get("msg", "invalid request")
    return f"{'.'.join(loc)}: {message}" if loc else message


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


def build_scrape_service(settings: Settings) -> ScrapeService:
    """Create the scrape service and everything it owns from *settings*.

    The caller is responsible for closing ``service.context.fetcher`` and
    ``service.cache``.
    """
    client = build_client(
        timeout=settings.fetch_timeout,
        connect_timeout=settings.fetch_connect_timeout,
        proxy=settings.http_proxy,
    )
    context = ScrapeContext(
        fetcher=HttpFetcher(client),
        credentials=Credentials(
            tumblr_api_key=settings.tumblr_api_key,
            twitter_bearer_token=settings.twitter_bearer_token,
        ),
        camo=CamoSigner(settings.camo_key, settings.camo_host),
    )
    cache: Optional[ResultCache] = None
    if settings.result_cache_url:
        cache = ResultCache.from_url(
            settings.result_cache_url,
            settings.result_cache_ttl_seconds,
        )
    return ScrapeService(
        build_registry(settings),
        context,
        cache=cache,
        scrape_timeout=settings.scrape_timeout,
    )


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application.

    Separated from the module-level ``app`` singleton so that tests can
    call ``create_app()`` with a patched settings environment before the
    singleton is created.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = get_settings()

    # Re-apply logging configuration with the correct level from settings.
    configure_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        description=(
            "Resolves social-media post URLs into direct image URLs plus "
            "author and description metadata."
        ),
        version="0.1.0",
        redirect_slashes=False,
    )

    # ---- Origin check middleware -------------------------------------------

    @application.middleware("http")
    async def origin_check_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Answer 404 to requests whose ``Origin`` is not allowed."""
        if request.url.path not in ORIGIN_EXEMPT_PATHS:
            origin = request.headers.get("origin")
            if not is_allowed_origin(settings, origin):
                logger.info("origin_rejected", origin=origin)
                return Response(status_code=404)
        return await call_next(request)

    # ---- Request logging middleware ----------------------------------------

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every incoming request and its response status + duration.

        Attaches a unique ``request_id`` to the structlog context so that all
        log lines emitted during a request can be correlated, and sets the
        ``X-Request-ID`` and ``X-Time-Taken`` response headers.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or route handler in the chain.

        Returns:
            The HTTP response from the handler.
        """
        request_id = str(uuid.uuid4())
        # Populate the ContextVar so stdlib logging records also carry the ID.
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed = time.perf_counter() - start
            status_code = response.status_code if response is not None else 500
            path = _route_path(request)
            http_requests_total.labels(
                method=request.method, path=path, status=str(status_code)
            ).inc()
            http_request_duration_seconds.labels(method=request.method, path=path).observe(
                elapsed
            )
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn(
                "request_complete",
                status_code=status_code,
                elapsed_ms=round(elapsed * 1000, 2),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Time-Taken"] = f"{elapsed * 1000:.4f}ms"
        return response

    # ---- Exception handlers ------------------------------------------------

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Reject malformed scrape requests with 400 and an ``errors`` body."""
        message = _validation_message(exc)
        logger.info("request_invalid", error=message)
        return JSONResponse(validation_error_body(message), status_code=400)

    # ---- Routers -----------------------------------------------------------

    from philomena_scraper.api.routes import health, scrape  # noqa: PLC0415

    application.include_router(scrape.router)
    if settings.enable_get_request:
        application.include_router(scrape.get_router)
    application.include_router(health.router)

    if settings.metrics_enabled:

        @application.get("/metrics", tags=["system"], include_in_schema=False)
        async def metrics() -> Response:
            """Prometheus text exposition of all process metrics."""
            body, content_type = get_metrics_response()
            return Response(content=body, media_type=content_type)

    # ---- Lifecycle events -------------------------------------------------

    @application.on_event("startup")
    async def on_startup() -> None:
        """Build the HTTP client, extractor registry and result cache."""
        service = build_scrape_service(settings)
        application.state.scrape_service = service
        application.state.result_cache = service.cache
        logger.info(
            "application_startup",
            app_name=settings.app_name,
            log_level=settings.log_level,
            extractors=[e.name for e in service.registry],
            camo_enabled=settings.camo_enabled,
            result_cache=service.cache is not None,
            get_route=settings.enable_get_request,
        )

    @application.on_event("shutdown")
    async def on_shutdown() -> None:
        """Close pooled upstream connections and the Redis client."""
        service: Optional[ScrapeService] = getattr(application.state, "scrape_service", None)
        if service is not None:
            await service.context.fetcher.aclose()
            if service.cache is not None:
                await service.cache.aclose()
        logger.info("application_shutdown")

    return application


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

app = create_app()
"""The FastAPI application instance.

This is the ASGI callable passed to Uvicorn.
"""
