"""Tumblr extractor configuration.

Tumblr posts are read through the v2 API, which requires an API key
(``TUMBLR_API_KEY``).  The API reports a resized ``original_size`` for each
photo, so the extractor probes the known size ladder for the largest
rendition that actually exists.
"""

from __future__ import annotations

import re

POST_URL_RE: re.Pattern[str] = re.compile(r"https?://(.*)/(image|post)/(\d+).*")
"""Post or image page on any blog host.  Group 3 is the post id."""

API_URL: str = "https://api.tumblr.com/v2/blog/{host}/posts/photo"
"""Posts endpoint; ``id`` and ``api_key`` are passed as query params."""

SIZE_RE: re.Pattern[str] = re.compile(r"_(\d+)(\..+)\Z")
"""Size suffix of a media URL, e.g. ``_500.jpg``."""

SIZES: tuple[int, ...] = (1280, 540, 500, 400, 250, 100, 75)
"""Photo widths, largest first."""

PREVIEW_WIDTH: int = 400
"""Width of the alt size used as the camo preview."""

HTML_PARSER: str = "html.parser"
"""BeautifulSoup tree builder for text post bodies."""
