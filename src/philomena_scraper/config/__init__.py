"""Configuration package for the Philomena scraper.

Re-exports the settings symbols so that callers can write::

    from philomena_scraper.config import get_settings
"""

from __future__ import annotations

from philomena_scraper.config.settings import (
    DEFAULT_NITTER_INSTANCES,
    Settings,
    get_settings,
)

__all__ = [
    "DEFAULT_NITTER_INSTANCES",
    "Settings",
    "get_settings",
]
