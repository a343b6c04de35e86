"""Unit tests for ExtractorRegistry ordering and validation."""

from __future__ import annotations

import httpx
import pytest

from philomena_scraper.config.settings import Settings
from philomena_scraper.extractors.base import Extractor, TargetUrl
from philomena_scraper.extractors.registry import ExtractorRegistry, build_registry


class _StubExtractor(Extractor):
    failure_label = "Stub parser failed"

    def __init__(self, name: str, priority: int, host: str = "example.com") -> None:
        self.name = name
        self.priority = priority
        self._host = host

    def matches(self, target: TargetUrl) -> bool:
        return target.host == self._host

    def steps(self):
        return []


def _target(url: str) -> TargetUrl:
    return TargetUrl(text=url, parsed=httpx.URL(url))


class TestExtractorRegistry:
    def test_iterates_in_priority_order(self) -> None:
        registry = ExtractorRegistry(
            [_StubExtractor("c", 30), _StubExtractor("a", 10), _StubExtractor("b", 20)]
        )
        assert [e.name for e in registry] == ["a", "b", "c"]
        assert len(registry) == 3

    def test_select_returns_lowest_priority_match(self) -> None:
        registry = ExtractorRegistry([_StubExtractor("late", 90), _StubExtractor("early", 5)])
        selected = registry.select(_target("https://example.com/x"))
        assert selected is not None
        assert selected.name == "early"

    def test_select_returns_none_without_match(self) -> None:
        registry = ExtractorRegistry([_StubExtractor("a", 10)])
        assert registry.select(_target("https://other.example.org/")) is None

    def test_duplicate_priority_rejected(self) -> None:
        with pytest.raises(ValueError, match="share priority 10"):
            ExtractorRegistry([_StubExtractor("a", 10), _StubExtractor("b", 10)])

    def test_duplicate_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="registered twice"):
            ExtractorRegistry([_StubExtractor("a", 10), _StubExtractor("a", 20)])

    def test_get_by_name(self) -> None:
        stub = _StubExtractor("a", 10)
        assert ExtractorRegistry([stub]).get("a") is stub

    def test_get_unknown_name_raises_key_error(self) -> None:
        with pytest.raises(KeyError, match="missing"):
            ExtractorRegistry([_StubExtractor("a", 10)]).get("missing")


class TestBuildRegistry:
    def test_contains_every_platform_in_order(self) -> None:
        registry = build_registry(Settings())
        assert [e.name for e in registry] == [
            "twitter",
            "nitter",
            "deviantart",
            "philomena",
            "buzzly",
            "tumblr",
            "raw",
        ]

    def test_describe_lists_labels(self) -> None:
        described = build_registry(Settings()).describe()
        assert described[0] == {
            "name": "twitter",
            "priority": 10,
            "failure_label": "Twitter parser failed",
        }
        assert described[-1]["name"] == "raw"
