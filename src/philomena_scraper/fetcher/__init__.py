"""Upstream HTTP fetcher shared by all extractors.

Sub-modules:
- ``config``        — user agent, pool limits and retry policy
- ``http_fetcher``  — pooled httpx client with timeout, retry and error translation
"""
