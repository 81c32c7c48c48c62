"""High-level service that orchestrates a product search request."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Optional, Sequence

from dealscout.agents.comparator import ProductComparator, find_better_alternative
from dealscout.agents.lib_agent.utils.openai_llm import OpenAILLM
from dealscout.agents.planner import QueryPlanner
from dealscout.configs import settings

from .errors import PlanExecutionError, PlanParseError, ProductSearchError, ValidationError
from .executor import ToolExecutor
from .models import ComparisonVerdict, Item, ProductDetails, ResultSet, Source
from .session import McpExtractionSession

logger = logging.getLogger("product_search.service")


class ProductSearchService:
    """Coordinate planning, extraction and comparison for one request."""

    def __init__(
        self,
        planner: QueryPlanner,
        executor: ToolExecutor,
        comparator: ProductComparator,
    ) -> None:
        self.planner = planner
        self.executor = executor
        self.comparator = comparator

    async def search(self, query: Any) -> ResultSet:
        """Plan, extract, rank and paginate products for a free-form query."""
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Query is required.")
        query = query.strip()
        logger.info("Received search query: '%s'", query)

        try:
            plan = await asyncio.to_thread(self.planner.plan, query)
        except PlanParseError as exc:
            logger.error("Planner output rejected: %s | raw=%r", exc.message, exc.raw_text)
            raise PlanExecutionError() from exc
        except Exception as exc:
            logger.exception("Planner call failed")
            raise PlanExecutionError() from exc

        return await self.executor.execute(plan)

    async def compare(self, items: Sequence[Item]) -> List[ComparisonVerdict]:
        """Pros/cons for up to three items; empty when the LLM misbehaves."""
        return await asyncio.to_thread(self.comparator.compare, items)

    def better_alternative(self, item: Item, candidates: Iterable[Item]) -> Optional[Item]:
        return find_better_alternative(item, candidates)

    async def details(self, url: str, platform: str) -> ProductDetails:
        """Feature list and description of one product page."""
        if not url.startswith(("http://", "https://")):
            raise ValidationError("A full product URL is required.")
        if platform not in {source.value for source in Source}:
            raise ValidationError(f"Unknown platform '{platform}'.")
        try:
            return await self.executor.fetch_details(url, platform)
        except Exception as exc:
            logger.exception("Fetching details failed for %s", url)
            raise ProductSearchError("Failed to fetch product details.") from exc


def create_product_search_service() -> ProductSearchService:
    """Wire the service with the configured LLM and extraction process."""
    llm = OpenAILLM(settings=settings)
    executor = ToolExecutor(
        session_factory=lambda: McpExtractionSession(settings.EXTRACTION_SERVER_COMMAND),
        call_timeout=settings.TOOL_CALL_TIMEOUT_SECONDS,
    )
    return ProductSearchService(
        planner=QueryPlanner(llm),
        executor=executor,
        comparator=ProductComparator(llm),
    )


_service: Optional[ProductSearchService] = None


def get_product_search_service() -> ProductSearchService:
    """FastAPI dependency returning the stateless, shared service."""
    global _service
    if _service is None:
        _service = create_product_search_service()
    return _service
