"""Twitter extractor package.

Scrapes photos attached to tweets on ``twitter.com`` and ``x.com`` through
the guest-token flow of the public web client.  A bearer token may be
configured with ``TWITTER_BEARER_TOKEN``; otherwise it is discovered from
the client JavaScript bundle on each scrape.
"""
