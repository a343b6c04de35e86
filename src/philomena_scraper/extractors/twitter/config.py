"""Twitter extractor configuration.

Twitter has no unauthenticated API for single tweets.  The extractor uses
the same guest-token flow as the public web client:

1. Fetch the tweet page and locate the ``main.<hash>.js`` client bundle.
2. Extract the bearer token embedded in that bundle.
3. ``POST guest/activate.json`` with the bearer to obtain a guest token.
4. Call the conversation timeline API with bearer + guest token.

Steps 1 and 2 are skipped when ``TWITTER_BEARER_TOKEN`` is configured.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# URL patterns
# ---------------------------------------------------------------------------

TWEET_URL_RE: re.Pattern[str] = re.compile(
    r"\Ahttps?://(?:mobile\.|www\.)?(?:twitter|x)\.com/([A-Za-z\d_]+)/status/(\d+)/?"
)
"""Tweet permalink.  Group 1 is the handle, group 2 the status id."""

SCRIPT_RE: re.Pattern[str] = re.compile(
    r'="(https://abs\.twimg\.com/responsive-web/client-web(?:-legacy)?/main\.[\da-z]+\.js)'
)
"""Client bundle reference inside the tweet page."""

BEARER_RE: re.Pattern[str] = re.compile(r'(AAAAAAAAAAAAA[^"]*)')
"""Bearer token literal inside the client bundle."""

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

PAGE_URL: str = "https://twitter.com/{user}/status/{status_id}"
"""Canonical tweet page; also the ``source_url`` of results."""

ACTIVATION_URL: str = "https://api.twitter.com/1.1/guest/activate.json"
"""Guest token activation endpoint."""

CONVERSATION_API_URL: str = (
    "https://api.twitter.com/2/timeline/conversation/{status_id}.json"
)
"""Conversation timeline endpoint; ``tweet_mode=extended`` is passed as a param."""

ORIG_SUFFIX: str = ":orig"
"""Size suffix stripped from ``media_url_https`` for the direct image URL."""
