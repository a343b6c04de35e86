"""Tumblr extractor package.

Reads photo and text posts through the Tumblr v2 API.  Requires
``TUMBLR_API_KEY``; without it every Tumblr scrape fails with a
credential error.
"""
