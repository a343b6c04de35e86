"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
All credentials and secrets are accessed exclusively through this module;
never call ``os.getenv`` directly elsewhere in the codebase.

List-valued settings (``ALLOWED_ORIGINS``, ``NITTER_INSTANCES``,
``PHILOMENA_INSTANCES``) accept either a comma-separated list or a JSON
array, e.g.::

    ALLOWED_ORIGINS=https://derpibooru.org,https://furbooru.org
    ALLOWED_ORIGINS='["https://derpibooru.org"]'

Usage::

    from philomena_scraper.config.settings import get_settings

    settings = get_settings()
    key = settings.tumblr_api_key
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_NITTER_INSTANCES: list[str] = [
    "nitter.net",
    "nitter.42l.fr",
    "nitter.nixnet.services",
    "nitter.mastodont.cat",
    "nitter.tedomum.net",
    "nitter.fdn.fr",
    "nitter.kavin.rocks",
    "tweet.lambda.dance",
    "nitter.cc",
    "nitter.vxempire.xyz",
    "nitter.unixfox.eu",
    "nitter.domain.glass",
    "nitter.eu",
    "nitter.ethibox.fr",
    "nitter.namazso.eu",
    "nitter.mailstation.de",
    "nitter.actionsack.com",
    "nitter.cattube.org",
    "nitter.dark.fail",
    "birdsite.xanny.family",
    "nitter.40two.app",
    "nitter.skrep.in",
]
"""Nitter instances accepted by the Nitter extractor unless overridden."""


class Settings(BaseSettings):
    """Service configuration backed by environment variables and an optional .env file.

    Every field has a default so the service starts with no configuration at
    all; platforms that need a credential (Tumblr) report it as missing at
    scrape time instead of failing startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ------------------------------------------------------------------
    # Listener
    # ------------------------------------------------------------------

    listen_host: str = "localhost"
    """Interface the bundled uvicorn runner binds to."""

    listen_port: int = 8080
    """Port the bundled uvicorn runner binds to."""

    # ------------------------------------------------------------------
    # Request acceptance
    # ------------------------------------------------------------------

    allowed_origins: Annotated[list[str], NoDecode] = []
    """Values accepted in the ``Origin`` header.  An empty list accepts any origin."""

    allow_empty_origin: bool = True
    """Accept requests that carry no ``Origin`` header (server-to-server callers)."""

    enable_get_request: bool = True
    """Expose ``GET /images/scrape`` next to the primary POST route."""

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    tumblr_api_key: Optional[str] = None
    """Tumblr v2 API consumer key.  Required only for Tumblr URLs."""

    twitter_bearer_token: Optional[str] = None
    """Bearer token for the Twitter web API.  When unset it is discovered
    from the public web client bundle on every scrape."""

    # ------------------------------------------------------------------
    # Outbound HTTP
    # ------------------------------------------------------------------

    http_proxy: Optional[str] = None
    """Proxy for all upstream requests (``http``, ``https``, ``socks5`` schemes)."""

    fetch_timeout: float = 5.0
    """Total per-request deadline for upstream calls, in seconds."""

    fetch_connect_timeout: float = 2.5
    """Connect deadline for upstream calls, in seconds."""

    scrape_timeout: float = 30.0
    """Deadline for a whole extractor pipeline, in seconds."""

    # ------------------------------------------------------------------
    # Camo
    # ------------------------------------------------------------------

    camo_key: Optional[str] = None
    """HMAC key shared with the camo image proxy."""

    camo_host: Optional[str] = None
    """Hostname of the camo image proxy.  Camo is disabled unless both
    ``camo_key`` and ``camo_host`` are set."""

    # ------------------------------------------------------------------
    # Platform configuration
    # ------------------------------------------------------------------

    nitter_instances: Annotated[list[str], NoDecode] = DEFAULT_NITTER_INSTANCES
    """Hostnames recognised as Nitter instances."""

    preferred_nitter_instance_host: Optional[str] = None
    """Instance that Nitter pages are fetched from, whichever instance was submitted."""

    philomena_instances: Annotated[list[str], NoDecode] = ["derpibooru.org"]
    """Hostnames of Philomena boorus whose image pages are scraped via the JSON API."""

    deviantart_legacy_hires: bool = True
    """Probe the legacy ``orig01.deviantart.net`` redirect for full-size originals."""

    # ------------------------------------------------------------------
    # Result cache
    # ------------------------------------------------------------------

    result_cache_url: Optional[str] = None
    """Redis URL for the scrape result cache.  Caching is off when unset."""

    result_cache_ttl_seconds: int = 6000
    """Lifetime of a cached scrape result."""

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    app_name: str = "Philomena Scraper"
    """Human-readable application name shown in the OpenAPI docs."""

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    metrics_enabled: bool = True
    """Expose Prometheus metrics at ``GET /metrics``."""

    @field_validator("nitter_instances", "philomena_instances", "allowed_origins", mode="before")
    @classmethod
    def _split_entries(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return text.split(",")

    @field_validator("nitter_instances", "philomena_instances", "allowed_origins")
    @classmethod
    def _strip_entries(cls, value: list[str]) -> list[str]:
        return [entry.strip() for entry in value if entry.strip()]

    @property
    def camo_enabled(self) -> bool:
        """``True`` when both camo settings are present."""
        return bool(self.camo_key and self.camo_host)


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Uses ``functools.lru_cache`` so that Pydantic Settings reads the environment
    and .env file exactly once per process lifetime.  In tests, call
    ``get_settings.cache_clear()`` after patching environment variables.

    Returns:
        Settings: The validated, immutable settings object.
    """
    return Settings()
