"""Domain values produced by the scrape pipeline.

These are plain frozen dataclasses: the extractor pipeline, dispatcher and
normalizer pass them around without any framework coupling.  The HTTP
schemas in :mod:`philomena_scraper.core.schemas` describe their wire shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ImageRef:
    """One image resource of a scraped post.

    Attributes:
        url: Direct URL of the full-size image.
        camo_url: Proxied display URL.  Equal to ``url`` when no camo proxy
            is configured.
    """

    url: str
    camo_url: str

    @classmethod
    def direct(cls, url: str) -> ImageRef:
        """Build an image whose display URL is the image URL itself."""
        return cls(url=url, camo_url=url)


@dataclass(frozen=True)
class ScrapeResult:
    """Successful scrape of a single post.

    ``images`` keeps the platform's native order; it is never sorted or
    deduplicated.  Missing textual metadata is the empty string.
    """

    source_url: str
    author_name: str = ""
    description: str = ""
    images: tuple[ImageRef, ...] = ()
    additional_tags: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation used by responses and the cache."""
        data: dict[str, Any] = {
            "source_url": self.source_url,
            "author_name": self.author_name,
            "description": self.description,
            "images": [{"url": i.url, "camo_url": i.camo_url} for i in self.images],
        }
        if self.additional_tags is not None:
            data["additional_tags"] = list(self.additional_tags)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScrapeResult:
        """Inverse of :meth:`to_dict`."""
        tags = data.get("additional_tags")
        return cls(
            source_url=data["source_url"],
            author_name=data.get("author_name", ""),
            description=data.get("description", ""),
            images=tuple(
                ImageRef(url=i["url"], camo_url=i["camo_url"]) for i in data["images"]
            ),
            additional_tags=tuple(tags) if tags is not None else None,
        )


@dataclass(frozen=True)
class ScrapeFailure:
    """Failed scrape: an ordered error path, general to specific."""

    path: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("ScrapeFailure.path must not be empty")


ScrapeOutcome = Union[ScrapeResult, ScrapeFailure]
"""What every extractor, the dispatcher and the scrape service return."""
