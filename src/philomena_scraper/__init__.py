"""Philomena scraper: resolves social-media post URLs to their image files."""

__version__ = "0.1.0"
