"""Constants and tuning parameters for the upstream HTTP fetcher."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

#: User-agent string sent with every upstream request.  Several platforms
#: serve bot-friendly markup to curl that they hide from browser agents.
USER_AGENT: str = "curl/7.83.1"

#: Default total deadline per upstream call (seconds).
DEFAULT_TIMEOUT: float = 5.0

#: Default connect deadline per upstream call (seconds).
DEFAULT_CONNECT_TIMEOUT: float = 2.5

#: Connection pool bounds for the shared client.
MAX_CONNECTIONS: int = 100
MAX_KEEPALIVE_CONNECTIONS: int = 20

# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------

#: Automatic retries after a transient transport failure.
MAX_RETRIES: int = 1

#: Methods that may be retried.  Anything else is sent exactly once.
IDEMPOTENT_METHODS: frozenset[str] = frozenset({"GET", "HEAD"})

# ---------------------------------------------------------------------------
# Proxy
# ---------------------------------------------------------------------------

#: Proxy URL schemes accepted in ``HTTP_PROXY``.
PROXY_SCHEMES: frozenset[str] = frozenset({"http", "https", "socks5"})
