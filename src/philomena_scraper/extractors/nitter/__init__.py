"""Nitter extractor package.

Scrapes tweet photos from allow-listed Nitter instances by parsing the
rendered HTML with BeautifulSoup.  No credentials are required.
"""
