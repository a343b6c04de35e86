"""Pydantic request/response schemas for the scrape API.

Used by the scrape routes for validation and OpenAPI documentation.  The
route handlers build response bodies through
:mod:`philomena_scraper.core.normalizer`; these models only describe them.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScrapeRequest(BaseModel):
    """Body of ``POST /images/scrape``.

    Attributes:
        url: Post URL to scrape.  A missing scheme is treated as ``https``.
    """

    # Philomena's form submissions carry a ``_method`` field alongside the URL.
    model_config = ConfigDict(extra="ignore")

    url: str = Field(min_length=1)


class ScrapeImageRead(BaseModel):
    """A single image of a successful scrape."""

    url: str
    camo_url: str


class ScrapeResultRead(BaseModel):
    """Success body of ``/images/scrape``."""

    source_url: str
    author_name: str
    description: str
    images: List[ScrapeImageRead]
    additional_tags: Optional[List[str]] = None


class ScrapeErrorRead(BaseModel):
    """Failure body: an error path ordered from general to specific."""

    errors: List[str]


class ExtractorRead(BaseModel):
    """One entry of ``GET /extractors``."""

    name: str
    priority: int
    failure_label: str
