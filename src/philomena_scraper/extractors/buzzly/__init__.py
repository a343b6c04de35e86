"""Buzzly.Art extractor package (GraphQL API)."""
