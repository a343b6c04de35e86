"""Extractor registry.

The set of extractors is closed: every supported platform is listed in
:func:`build_registry`.  The registry is built once at application startup
from settings and is read-only afterwards; there is no registration API.

Ordering
--------
Extractors are kept sorted by ``priority`` (lower first).  Classification
walks them in that order and the first match wins, so the outcome depends
only on priorities, never on the order in which extractors were passed in.
Two extractors with the same priority (or the same name) are rejected when
the registry is built.

Example — looking up an extractor::

    from philomena_scraper.extractors.registry import build_registry

    registry = build_registry(get_settings())
    twitter = registry.get("twitter")
    registry.describe()
    # [{"name": "twitter", "priority": 10, "failure_label": "..."}, ...]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from philomena_scraper.extractors.base import Extractor, TargetUrl
from philomena_scraper.extractors.buzzly.extractor import BuzzlyExtractor
from philomena_scraper.extractors.deviantart.extractor import DeviantArtExtractor
from philomena_scraper.extractors.nitter.extractor import NitterExtractor
from philomena_scraper.extractors.philomena.extractor import PhilomenaExtractor
from philomena_scraper.extractors.raw.extractor import RawExtractor
from philomena_scraper.extractors.tumblr.extractor import TumblrExtractor
from philomena_scraper.extractors.twitter.extractor import TwitterExtractor

if TYPE_CHECKING:
    from philomena_scraper.config.settings import Settings

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """Immutable, priority-ordered collection of extractors.

    Args:
        extractors: Extractor instances in any order.

    Raises:
        ValueError: If two extractors share a priority or a name.
    """

    def __init__(self, extractors: Iterable[Extractor]) -> None:
        ordered = tuple(sorted(extractors, key=lambda e: e.priority))
        seen_priorities: dict[int, str] = {}
        seen_names: set[str] = set()
        for extractor in ordered:
            if extractor.priority in seen_priorities:
                raise ValueError(
                    f"Extractors '{seen_priorities[extractor.priority]}' and "
                    f"'{extractor.name}' share priority {extractor.priority}."
                )
            if extractor.name in seen_names:
                raise ValueError(f"Extractor '{extractor.name}' is registered twice.")
            seen_priorities[extractor.priority] = extractor.name
            seen_names.add(extractor.name)
        self._extractors: tuple[Extractor, ...] = ordered

    def __iter__(self) -> Iterator[Extractor]:
        return iter(self._extractors)

    def __len__(self) -> int:
        return len(self._extractors)

    def get(self, name: str) -> Extractor:
        """Return the extractor registered under *name*.

        Raises:
            KeyError: If no extractor has that name.
        """
        for extractor in self._extractors:
            if extractor.name == name:
                return extractor
        registered = [e.name for e in self._extractors]
        raise KeyError(
            f"No extractor registered as '{name}'. Registered extractors: {registered}."
        )

    def select(self, target: TargetUrl) -> Extractor | None:
        """Return the first extractor, in priority order, that matches *target*."""
        for extractor in self._extractors:
            if extractor.matches(target):
                logger.debug("registry: %s matched %s", extractor.name, target)
                return extractor
        return None

    def describe(self) -> list[dict[str, object]]:
        """Return name, priority and failure label of every extractor, in order.

        Used by ``GET /extractors``.
        """
        return [
            {
                "name": e.name,
                "priority": e.priority,
                "failure_label": e.failure_label,
            }
            for e in self._extractors
        ]


def build_registry(settings: Settings) -> ExtractorRegistry:
    """Build the registry of all supported platforms from *settings*."""
    registry = ExtractorRegistry(
        [
            TwitterExtractor(),
            NitterExtractor(
                settings.nitter_instances,
                preferred_host=settings.preferred_nitter_instance_host,
            ),
            DeviantArtExtractor(legacy_hires=settings.deviantart_legacy_hires),
            PhilomenaExtractor(settings.philomena_instances),
            BuzzlyExtractor(),
            TumblrExtractor(),
            RawExtractor(),
        ]
    )
    logger.info(
        "registry: %d extractors: %s",
        len(registry),
        ", ".join(e.name for e in registry),
    )
    return registry
