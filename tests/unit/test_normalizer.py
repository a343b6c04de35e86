"""Unit tests for the scrape response normalizer."""

from __future__ import annotations

from philomena_scraper.core.models import ImageRef, ScrapeFailure, ScrapeResult
from philomena_scraper.core.normalizer import to_response_body, validation_error_body


def test_success_body_shape() -> None:
    result = ScrapeResult(
        source_url="https://twitter.com/a/status/1",
        author_name="a",
        description="text",
        images=(ImageRef(url="https://img/1.png", camo_url="https://camo/1"),),
    )

    assert to_response_body(result) == {
        "source_url": "https://twitter.com/a/status/1",
        "author_name": "a",
        "description": "text",
        "images": [{"url": "https://img/1.png", "camo_url": "https://camo/1"}],
    }


def test_additional_tags_only_when_present() -> None:
    result = ScrapeResult(source_url="s", additional_tags=("pony", "artist:x"))
    assert to_response_body(result)["additional_tags"] == ["pony", "artist:x"]

    assert "additional_tags" not in to_response_body(ScrapeResult(source_url="s"))


def test_empty_tag_list_is_kept() -> None:
    assert to_response_body(ScrapeResult(source_url="s", additional_tags=()))["additional_tags"] == []


def test_images_keep_order() -> None:
    images = tuple(ImageRef.direct(f"https://img/{n}.png") for n in (3, 1, 2, 1))
    body = to_response_body(ScrapeResult(source_url="s", images=images))
    assert [i["url"] for i in body["images"]] == [
        "https://img/3.png",
        "https://img/1.png",
        "https://img/2.png",
        "https://img/1.png",
    ]


def test_failure_body_is_error_path() -> None:
    failure = ScrapeFailure(("Twitter parser failed", "invalid api response", "API request is not 200 code"))
    assert to_response_body(failure) == {
        "errors": ["Twitter parser failed", "invalid api response", "API request is not 200 code"]
    }


def test_validation_error_body() -> None:
    assert validation_error_body("url: Field required") == {"errors": ["url: Field required"]}
