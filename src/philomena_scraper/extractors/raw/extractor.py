"""Raw-file extractor: the catch-all for direct image links."""

from __future__ import annotations

from philomena_scraper.core.models import ImageRef, ScrapeResult
from philomena_scraper.extractors.base import Extractor, ScrapeContext, Step, TargetUrl
from philomena_scraper.extractors.raw.config import IMAGE_EXTENSIONS


class RawExtractor(Extractor):
    """Returns the submitted URL itself as the only image.

    No request is made.  The camo URL is the submitted URL too.
    """

    name = "raw"
    failure_label = "Raw parser failed"
    priority = 100

    def matches(self, target: TargetUrl) -> bool:
        return target.path.lower().endswith(IMAGE_EXTENSIONS)

    def steps(self) -> list[Step]:
        return [Step("could not build image", self._single_image)]

    async def _single_image(self, target: TargetUrl, context: ScrapeContext) -> ScrapeResult:
        return ScrapeResult(
            source_url=target.text,
            author_name="",
            description="",
            images=(ImageRef.direct(target.text),),
        )
