"""Unit tests for camo URL signing."""

from __future__ import annotations

import hashlib
import hmac

import pytest

from philomena_scraper.core.camo import CamoSigner
from philomena_scraper.core.exceptions import UpstreamParseError

IMAGE = "https://pbs.twimg.com/media/EwxvzkEXAAMFg7K.jpg"


def test_disabled_signer_returns_url_unchanged() -> None:
    assert CamoSigner().sign(IMAGE) == IMAGE
    assert CamoSigner("key", None).sign(IMAGE) == IMAGE
    assert CamoSigner(None, "camo.example.com").sign(IMAGE) == IMAGE


def test_signed_url_layout() -> None:
    signed = CamoSigner("secret", "camo.example.com").sign(IMAGE)

    digest = hmac.new(b"secret", IMAGE.encode(), hashlib.sha1).hexdigest()
    assert signed == f"https://camo.example.com/{digest}/{IMAGE.encode().hex()}"


def test_host_with_scheme_is_kept() -> None:
    signed = CamoSigner("secret", "http://camo.local:8081/").sign(IMAGE)
    assert signed.startswith("http://camo.local:8081/")
    assert "//" not in signed[len("http://"):]


def test_relative_url_rejected_when_enabled() -> None:
    with pytest.raises(UpstreamParseError, match="camo url invalid"):
        CamoSigner("secret", "camo.example.com").sign("/pic/media.png")


def test_enabled_flag() -> None:
    assert CamoSigner("secret", "camo.example.com").enabled is True
    assert CamoSigner("", "camo.example.com").enabled is False
