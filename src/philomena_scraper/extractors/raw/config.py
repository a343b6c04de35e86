"""Raw-file extractor configuration."""

from __future__ import annotations

IMAGE_EXTENSIONS: tuple[str, ...] = (".gif", ".jpeg", ".jpg", ".png", ".svg", ".webm")
"""Path suffixes (lower-cased) treated as direct image links."""
