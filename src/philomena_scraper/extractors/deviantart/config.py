"""DeviantArt extractor configuration.

DeviantArt pages embed the display image as a ``<link rel="preload">`` tag.
That image is usually a resized preview served from the wixmp CDN; the
higher-resolution variants below are derived from it.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Page scraping
# ---------------------------------------------------------------------------

IMAGE_RE: re.Pattern[str] = re.compile(
    r'<link data-rh="true" rel="preload" href="([^"]*)" as="image"/>'
)
SOURCE_RE: re.Pattern[str] = re.compile(r'<link data-rh="true" rel="canonical" href="([^"]*)"/>')
ARTIST_RE: re.Pattern[str] = re.compile(r"https://www\.deviantart\.com/([^/]*)/art")
SERIAL_RE: re.Pattern[str] = re.compile(r"https://www\.deviantart\.com/(?:.*?)-(\d+)\Z")

# ---------------------------------------------------------------------------
# High-resolution variants
# ---------------------------------------------------------------------------

CDN_INTERMEDIARY_RE: re.Pattern[str] = re.compile(
    r"(https://images-wixmp-[0-9a-f]+\.wixmp\.com)(?:/intermediary)?/f/([^/]*)/([^/?]*)"
)
"""Groups: CDN origin, object uuid, object name."""

INTERMEDIARY_URL: str = "{origin}/intermediary/f/{uuid}/{name}"
"""Untransformed object behind the CDN's ``/v1/fill`` resize."""

JPG_QUALITY_RE: re.Pattern[str] = re.compile(
    r"(https://[0-9a-z\-.]+(?:/intermediary)?/f/[0-9a-f\-]+/[0-9a-z\-]+\.jpg"
    r"/v1/fill/w_[0-9]+,h_[0-9]+,q_)([0-9]+)(,[a-z]+/[a-z0-6_\-]+\.jpe?g.*)"
)
"""Resized JPEG preview; group 2 is the quality setting."""

JPG_MAX_QUALITY: str = "100"

LEGACY_HIRES_URL: str = "http://orig01.deviantart.net/x_by_x-d{serial36}.png"
"""Legacy original-file endpoint; answers with a redirect to the original."""

REDIRECT_STATUSES: frozenset[int] = frozenset({301, 302, 303, 307, 308})
