"""Prometheus metrics for the Philomena scraper.

All metrics are module-level singletons registered on the default
``REGISTRY``.  They are safe to import from multiple modules because the
module is only executed once per process.

Metrics defined here:

  scrape_requests_total{extractor, outcome}
      Counter — finished scrapes by extractor name and outcome
      (success, failure, timeout, cached, no_match, invalid_url).

  scrape_duration_seconds{extractor}
      Histogram — wall-clock duration of an extractor pipeline.

  upstream_requests_total{method, outcome}
      Counter — upstream HTTP calls made by the fetcher, by outcome
      (ok, http_error, timeout, network_error, retried).

  http_requests_total{method, path, status}
      Counter — inbound HTTP requests handled by the FastAPI application.

  http_request_duration_seconds{method, path}
      Histogram — inbound request latency in seconds.

Usage::

    from philomena_scraper.api.metrics import scrape_requests_total
    scrape_requests_total.labels(extractor="twitter", outcome="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Scrape metrics
# ---------------------------------------------------------------------------

scrape_requests_total: Counter = Counter(
    "scrape_requests_total",
    "Finished scrapes by extractor and outcome.",
    labelnames=["extractor", "outcome"],
)

scrape_duration_seconds: Histogram = Histogram(
    "scrape_duration_seconds",
    "Extractor pipeline duration in seconds.",
    labelnames=["extractor"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# ---------------------------------------------------------------------------
# Upstream metrics (populated by the HTTP fetcher)
# ---------------------------------------------------------------------------

upstream_requests_total: Counter = Counter(
    "upstream_requests_total",
    "Upstream HTTP calls by method and outcome.",
    labelnames=["method", "outcome"],
)

# ---------------------------------------------------------------------------
# HTTP metrics (populated by middleware in main.py)
# ---------------------------------------------------------------------------

http_requests_total: Counter = Counter(
    "http_requests_total",
    "HTTP requests handled by the FastAPI application.",
    labelnames=["method", "path", "status"],
)

http_request_duration_seconds: Histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds.",
    labelnames=["method", "path"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)


# ---------------------------------------------------------------------------
# Response helper
# ---------------------------------------------------------------------------


def get_metrics_response() -> tuple[bytes, str]:
    """Generate a Prometheus text-format metrics response.

    Returns:
        A tuple of (body_bytes, content_type_string) for a FastAPI ``Response``.
    """
    from prometheus_client import CONTENT_TYPE_LATEST, generate_latest  # noqa: PLC0415

    return generate_latest(), CONTENT_TYPE_LATEST
