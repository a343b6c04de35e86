"""Philomena extractor configuration.

Philomena boorus expose every image through a public JSON API, so image
pages on a known instance are mapped straight to their API endpoint.
"""

from __future__ import annotations

import re

IMAGE_PATH_RE: re.Pattern[str] = re.compile(r"\A/(?:images/)?(?P<image_id>\d+)")
"""Image page path: ``/<id>`` or ``/images/<id>``."""

API_URL: str = "https://{host}/api/v1/json/images/{image_id}"
"""Image endpoint of the Philomena JSON API."""

ARTIST_TAG_PREFIX: str = "artist:"
"""Namespace of the tag naming the artist."""
