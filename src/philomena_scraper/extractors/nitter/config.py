"""Nitter extractor configuration.

The instance allow-list itself lives in settings
(:data:`philomena_scraper.config.settings.DEFAULT_NITTER_INSTANCES`) so that
operators can override it with ``NITTER_INSTANCES``.
"""

from __future__ import annotations

import re

TWEET_PATH_RE: re.Pattern[str] = re.compile(r"\A/([A-Za-z\d_]+)/status/(\d+)")
"""Path of a tweet page on a Nitter instance."""

HTML_PARSER: str = "html.parser"
"""BeautifulSoup tree builder for Nitter pages."""

AUTHOR_SELECTOR: str = "div.main-tweet a.username"
DESCRIPTION_SELECTOR: str = "div.tweet-content"
SOURCE_SELECTOR: str = '[title="Open in Twitter"]'
IMAGE_SELECTOR: str = "div.main-tweet div.attachments div.image"
IMAGE_LINK_SELECTOR: str = "a.still-image"
