"""DeviantArt extractor package.

Scrapes deviation pages and derives higher-resolution variants of the
preview image from the wixmp CDN.
"""
