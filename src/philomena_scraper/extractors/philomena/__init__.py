"""Philomena extractor package (Derpibooru and other configured instances)."""
