"""Response normalizer.

Maps every scrape outcome onto the single response shape of
``/images/scrape``:

- success: ``{"source_url", "author_name", "description", "images": [...]}``
  plus ``"additional_tags"`` when the platform reports tags;
- failure: ``{"errors": [...]}`` with the error path, general to specific.

Values pass through verbatim.
"""

from __future__ import annotations

from typing import Any

from philomena_scraper.core.models import ScrapeFailure, ScrapeOutcome


def to_response_body(outcome: ScrapeOutcome) -> dict[str, Any]:
    """Return the JSON body for *outcome*."""
    if isinstance(outcome, ScrapeFailure):
        return {"errors": list(outcome.path)}
    return outcome.to_dict()


def validation_error_body(message: str) -> dict[str, Any]:
    """Return the body of a 400 response for a malformed request."""
    return {"errors": [message]}
