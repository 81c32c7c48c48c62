"""Execute a validated plan against the isolated extraction process."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, List, Sequence

from .errors import (
    ExtractionFailure,
    PlanExecutionError,
    ProductSearchError,
    UnknownToolError,
)
from .filters import deduplicate, filter_items
from .models import (
    DEFAULT_POLICY,
    Item,
    Plan,
    PlanStep,
    ProductDetails,
    ResultSet,
    SearchPolicy,
)
from .ranking import rank_items
from .session import ExtractionSession
from .tools import PRODUCT_DETAILS

logger = logging.getLogger("product_search.executor")


def paginate(ranked: Sequence[Item], display_limit: int) -> ResultSet:
    """Split ranked items into the visible slice and the held-back rest."""
    return ResultSet(
        items=list(ranked[:display_limit]),
        display_limit=display_limit,
        held_back_items=list(ranked[display_limit:]),
    )


class ToolExecutor:
    """Run plan steps sequentially and turn their items into a ResultSet."""

    def __init__(
        self,
        session_factory: Callable[[], ExtractionSession],
        policy: SearchPolicy = DEFAULT_POLICY,
        call_timeout: float = 120,
    ) -> None:
        self.session_factory = session_factory
        self.policy = policy
        self.call_timeout = call_timeout

    async def execute(self, plan: Plan) -> ResultSet:
        """Execute every step, then deduplicate, rank and paginate.

        One extraction process serves the whole plan and is torn down on
        every exit path. Any failure at this level is logged and surfaced
        as a generic PlanExecutionError; no partial result set is returned.
        """
        try:
            async with self.session_factory() as session:
                collected = await self._run_steps(session, plan.steps)
        except json.JSONDecodeError as exc:
            logger.error("Extraction returned invalid JSON: %s", exc)
            raise PlanExecutionError() from exc
        except ProductSearchError as exc:
            logger.error("Plan execution failed: %s", exc.message)
            raise PlanExecutionError() from exc
        except Exception as exc:
            logger.exception("Unexpected error while executing plan")
            raise PlanExecutionError() from exc

        merged = deduplicate(collected)
        ranked = rank_items(merged, self.policy)
        result = paginate(ranked, plan.display_limit)
        logger.info(
            "Plan executed: %d steps, %d items shown, %d held back",
            len(plan.steps),
            result.count,
            len(result.held_back_items),
        )
        return result

    async def fetch_details(self, url: str, platform: str) -> ProductDetails:
        """Call the product-details tool in a fresh extraction process."""
        async with self.session_factory() as session:
            response = await asyncio.wait_for(
                session.call_tool(PRODUCT_DETAILS, {"url": url, "platform": platform}),
                timeout=self.call_timeout,
            )
        if response.is_error:
            raise ExtractionFailure(platform, response.text or "Details tool failed.")
        payload = json.loads(response.text)
        if not isinstance(payload, dict) or payload.get("error"):
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ExtractionFailure(platform, message or "Unexpected details payload.")
        return ProductDetails(
            features=[str(feature) for feature in payload.get("features") or []],
            description=str(payload.get("description") or ""),
        )

    async def _run_steps(
        self, session: ExtractionSession, steps: Sequence[PlanStep]
    ) -> List[Item]:
        registered = await session.list_tools()
        for step in steps:
            if step.tool not in registered:
                raise UnknownToolError(step.tool)

        collected: List[Item] = []
        failures = 0
        for index, step in enumerate(steps):
            try:
                items = await self._run_step(session, step)
            except ExtractionFailure as exc:
                failures += 1
                logger.warning("Step %d (%s) failed: %s", index, step.tool, exc.message)
                continue
            logger.info("Step %d (%s) returned %d items", index, step.tool, len(items))
            # Append now, order is settled by the ranker afterwards.
            collected.extend(items)

        if steps and failures == len(steps):
            raise ExtractionFailure("all", "Every extraction step failed.")
        return collected

    async def _run_step(self, session: ExtractionSession, step: PlanStep) -> List[Item]:
        source = step.request.platform
        try:
            response = await asyncio.wait_for(
                session.call_tool(step.tool, step.request.to_arguments()),
                timeout=self.call_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ExtractionFailure(source, "Extraction timed out.") from exc

        if response.is_error:
            raise ExtractionFailure(source, response.text or "Extraction tool failed.")

        payload: Any = json.loads(response.text)
        if not isinstance(payload, dict):
            raise ExtractionFailure(source, "Extraction payload is not an object.")
        if payload.get("error"):
            raise ExtractionFailure(source, str(payload["error"]))

        for diagnostics in payload.get("diagnostics") or []:
            logger.debug("Extraction diagnostics: %s", diagnostics)

        items: List[Item] = []
        for raw in payload.get("items") or []:
            try:
                items.append(Item.from_dict(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Dropping malformed item %r: %s", raw, exc)
        return filter_items(items, step.request)
