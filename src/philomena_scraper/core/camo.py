"""Camo URL signing.

A camo proxy serves remote images from its own host so that pages embedding
them do not hotlink the origin.  URLs take the form::

    https://<camo_host>/<hex HMAC-SHA1(key, url)>/<hex(url)>

When no key or host is configured the signer returns URLs unchanged, which
is how ``camo_url`` defaults to ``url`` in scrape results.
"""

from __future__ import annotations

import hashlib
import hmac

from philomena_scraper.core.exceptions import UpstreamParseError


class CamoSigner:
    """Builds camo display URLs.

    Args:
        key: Shared HMAC secret, or ``None`` to disable camo.
        host: Camo proxy host (with or without scheme), or ``None``.
    """

    def __init__(self, key: str | None = None, host: str | None = None) -> None:
        self._key = key.encode("utf-8") if key else None
        if host and "://" not in host:
            host = f"https://{host}"
        self._base = host.rstrip("/") if host else None

    @property
    def enabled(self) -> bool:
        return self._key is not None and self._base is not None

    def sign(self, url: str) -> str:
        """Return the camo URL for *url*, or *url* itself when camo is disabled.

        Raises:
            UpstreamParseError: If *url* is not an absolute http(s) URL.
        """
        if not self.enabled:
            return url
        if not url.startswith(("http://", "https://")):
            raise UpstreamParseError(f"camo url invalid: {url!r} is not absolute")
        encoded = url.encode("utf-8")
        digest = hmac.new(self._key, encoded, hashlib.sha1).hexdigest()  # type: ignore[arg-type]
        return f"{self._base}/{digest}/{encoded.hex()}"
