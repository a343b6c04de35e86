"""Abstract base class and pipeline runner for platform extractors.

Every supported platform subclasses ``Extractor`` and implements two
things: a pure ``matches`` predicate and a ``steps`` pipeline.  A pipeline
is an ordered list of :class:`Step` objects.  Each step receives the
previous step's output (the first receives the :class:`TargetUrl`) and the
last must produce a :class:`~philomena_scraper.core.models.ScrapeResult`.

Steps signal failure by raising a
:class:`~philomena_scraper.core.exceptions.PhilomenaScraperError`.  The
runner stops at the first failing step and returns a
:class:`~philomena_scraper.core.models.ScrapeFailure` whose path is::

    [extractor.failure_label, step.description, *exception.path]

so nothing unwinds past ``Extractor.scrape``.

Example::

    class ExampleExtractor(Extractor):
        name = "example"
        failure_label = "Example parser failed"
        priority = 70

        def matches(self, target):
            return target.host == "example.org"

        def steps(self):
            return [
                Step("could not fetch post", self._fetch),
                Step("could not extract images", self._extract),
            ]
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx

from philomena_scraper.core.camo import CamoSigner
from philomena_scraper.core.exceptions import PhilomenaScraperError
from philomena_scraper.core.models import ScrapeFailure, ScrapeOutcome, ScrapeResult
from philomena_scraper.fetcher.http_fetcher import HttpFetcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetUrl:
    """A submitted URL after trimming and scheme completion.

    Attributes:
        text: The normalized URL string (``https://`` added when no scheme
            was given).  Raw-file results echo this value.
        parsed: The parsed form used for host/path checks.
    """

    text: str
    parsed: httpx.URL

    @property
    def host(self) -> str:
        return self.parsed.host

    @property
    def path(self) -> str:
        return self.parsed.path

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Credentials:
    """Opaque, read-only platform credentials injected into extractors."""

    tumblr_api_key: str | None = field(default=None, repr=False)
    twitter_bearer_token: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class ScrapeContext:
    """Everything a pipeline may touch besides its own input.

    Shared by all concurrent scrapes; none of its members hold per-request
    state.
    """

    fetcher: HttpFetcher
    credentials: Credentials
    camo: CamoSigner


StepFunc = Callable[[Any, ScrapeContext], Awaitable[Any]]


@dataclass(frozen=True)
class Step:
    """One named stage of an extractor pipeline.

    Attributes:
        description: Error frame pushed onto the path when this step fails.
        func: Coroutine function ``(previous_output, context) -> output``.
    """

    description: str
    func: StepFunc


async def run_pipeline(
    failure_label: str,
    steps: Sequence[Step],
    target: TargetUrl,
    context: ScrapeContext,
) -> ScrapeOutcome:
    """Run *steps* in order, stopping at the first failure.

    Args:
        failure_label: Top error frame naming the extractor.
        steps: The pipeline.
        target: Input of the first step.
        context: Shared fetcher, credentials and camo signer.

    Returns:
        The last step's :class:`ScrapeResult`, or a :class:`ScrapeFailure`.
    """
    value: Any = target
    for step in steps:
        try:
            value = await step.func(value, context)
        except PhilomenaScraperError as exc:
            logger.info(
                "pipeline: %s / %s: %s",
                failure_label,
                step.description,
                " / ".join(exc.path),
            )
            return ScrapeFailure((failure_label, step.description, *exc.path))
        except Exception:  # noqa: BLE001
            logger.exception("pipeline: %s / %s crashed", failure_label, step.description)
            return ScrapeFailure((failure_label, step.description, "internal error"))

    if not isinstance(value, ScrapeResult):
        logger.error("pipeline: %s produced %r instead of a result", failure_label, value)
        return ScrapeFailure((failure_label, "pipeline produced no result"))
    return value


class Extractor(ABC):
    """Abstract base class for all platform extractors.

    Class Attributes:
        name: Unique identity tag (e.g. ``"twitter"``).  Used in logs,
            metrics and ``GET /extractors``.
        failure_label: Top frame of every error path this extractor returns
            (e.g. ``"Twitter parser failed"``).
        priority: Classification order.  Lower values are tested first, so
            specific matchers get low numbers and catch-alls high ones.

    Instances hold only immutable configuration and may be shared across
    concurrent scrapes.
    """

    name: ClassVar[str]
    failure_label: ClassVar[str]
    priority: ClassVar[int]

    @abstractmethod
    def matches(self, target: TargetUrl) -> bool:
        """Return ``True`` if this extractor handles *target*.  Must not do I/O."""

    @abstractmethod
    def steps(self) -> Sequence[Step]:
        """Return the ordered scrape pipeline."""

    async def scrape(self, target: TargetUrl, context: ScrapeContext) -> ScrapeOutcome:
        """Run this extractor's pipeline against *target*."""
        return await run_pipeline(self.failure_label, self.steps(), target, context)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"
