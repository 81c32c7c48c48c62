"""Extraction capability: load source pages and recover qualifying items."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .errors import ExtractionFailure
from .models import (
    DEFAULT_POLICY,
    ExtractionBatch,
    ExtractionRequest,
    ProductDetails,
    SearchPolicy,
    Source,
)
from .page_loader import PageLoader
from .providers.amazon import AmazonExtractor
from .providers.base import BaseProductExtractor
from .providers.flipkart import FlipkartExtractor

logger = logging.getLogger("product_search.scraper")


def default_extractors(
    policy: SearchPolicy = DEFAULT_POLICY,
) -> Dict[Source, BaseProductExtractor]:
    return {
        Source.AMAZON: AmazonExtractor(policy),
        Source.FLIPKART: FlipkartExtractor(policy),
    }


class ProductScraper:
    """Run the per-source extractors of one request over a shared loader."""

    def __init__(
        self,
        loader_factory: Callable[[], PageLoader],
        extractors: Optional[Mapping[Source, BaseProductExtractor]] = None,
        source_timeout: float = 90,
    ) -> None:
        self.loader_factory = loader_factory
        self.extractors = extractors or default_extractors()
        self.source_timeout = source_timeout

    async def scrape(self, request: ExtractionRequest) -> Dict[str, Any]:
        """Return ``{items, count, diagnostics}`` for the requested sources.

        A failing source is logged and left out. When every requested source
        fails the payload carries an ``error`` message instead of items.
        """
        sources = request.sources()
        async with self.loader_factory() as loader:
            outcomes = await asyncio.gather(
                *(self._scrape_source(loader, source, request) for source in sources),
                return_exceptions=True,
            )

        items: List[Dict[str, Any]] = []
        diagnostics: List[Dict[str, Any]] = []
        failures: List[str] = []
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.warning("%s extraction failed: %s", source.value, outcome)
                failures.append(f"{source.value}: {outcome}")
                continue
            items.extend(item.to_dict() for item in outcome.items)
            diagnostics.append(outcome.diagnostics.to_dict())

        payload: Dict[str, Any] = {
            "items": items,
            "count": len(items),
            "diagnostics": diagnostics,
        }
        if failures and len(failures) == len(sources):
            payload["error"] = "; ".join(failures)
        elif failures:
            payload["failedSources"] = failures
        return payload

    async def details(self, url: str, platform: str) -> ProductDetails:
        """Read the feature list and description of one product page."""
        extractor = self.extractors[Source(platform)]
        async with self.loader_factory() as loader:
            html = await asyncio.wait_for(loader.load(url), timeout=self.source_timeout)
        return extractor.extract_details(html)

    async def _scrape_source(
        self, loader: PageLoader, source: Source, request: ExtractionRequest
    ) -> ExtractionBatch:
        extractor = self.extractors.get(source)
        if extractor is None:
            raise ExtractionFailure(source.value, "No extractor registered.")

        url = extractor.build_search_url(request.search)
        try:
            html = await asyncio.wait_for(
                loader.load(url, extractor.wait_selector), timeout=self.source_timeout
            )
        except asyncio.TimeoutError as exc:
            raise ExtractionFailure(source.value, f"Timed out loading {url}.") from exc
        return await asyncio.to_thread(extractor.extract, html, request)
