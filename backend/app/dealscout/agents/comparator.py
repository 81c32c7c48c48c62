"""Compare products: deterministic better alternative and LLM pros/cons."""

from __future__ import annotations

import json
import logging
from string import Template
from typing import Any, Dict, Iterable, List, Optional, Sequence

from dealscout.agents.lib_agent.agent_prompt_loader import AgentPromptLoader
from dealscout.agents.lib_agent.base_llm import BaseLLM
from dealscout.agents.plan_interpreter import strip_wrapping
from dealscout.services.product_search.errors import ComparisonFailure
from dealscout.services.product_search.models import ComparisonVerdict, Item

logger = logging.getLogger("product_search.comparator")

MAX_COMPARED_ITEMS = 3


def find_better_alternative(item: Item, candidates: Iterable[Item]) -> Optional[Item]:
    """Cheaper candidate rated at least as well as ``item``.

    A candidate qualifies when it has a different id, a rating not below the
    reference rating, and a positive price strictly below the reference
    price. Highest rating wins, then lowest price. Missing ratings count as 0.
    """
    if item.price is None:
        return None
    reference_rating = item.rating or 0.0

    best: Optional[Item] = None
    for candidate in candidates:
        if candidate.id == item.id or candidate.price is None:
            continue
        rating = candidate.rating or 0.0
        if rating < reference_rating:
            continue
        if not 0 < candidate.price < item.price:
            continue
        if best is None:
            best = candidate
            continue
        best_rating = best.rating or 0.0
        if rating > best_rating or (
            rating == best_rating and candidate.price < (best.price or 0.0)
        ):
            best = candidate
    return best


def _as_strings(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [str(entry) for entry in value]


def parse_verdicts(raw: str, items: Sequence[Item]) -> List[ComparisonVerdict]:
    """Decode the comparison answer into verdicts of the submitted items."""
    try:
        payload = json.loads(strip_wrapping(raw or ""))
    except json.JSONDecodeError as exc:
        raise ComparisonFailure(f"Comparison is not valid JSON: {exc.msg}", raw) from exc

    if isinstance(payload, dict):
        payload = payload.get("comparison") or payload.get("products")
    if not isinstance(payload, list):
        raise ComparisonFailure("Comparison is not a list.", raw)

    submitted = {item.id for item in items}
    verdicts: List[ComparisonVerdict] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        item_id = str(entry.get("id") or entry.get("asin") or "")
        if item_id not in submitted:
            continue
        verdicts.append(
            ComparisonVerdict(
                item_id=item_id,
                pros=_as_strings(entry.get("pros")),
                cons=_as_strings(entry.get("cons")),
                best_for=str(entry.get("bestFor") or ""),
            )
        )
    return verdicts


class ProductComparator:
    """Ask the LLM for pros/cons of a few products; never fails the request."""

    name = "comparator"

    def __init__(
        self, llm: BaseLLM, prompt_loader: Optional[AgentPromptLoader] = None
    ) -> None:
        self.llm = llm
        self.prompt_loader = prompt_loader or AgentPromptLoader()

    def build_messages(self, items: Sequence[Item]) -> List[Dict[str, Any]]:
        products = json.dumps(
            [
                {
                    "id": item.id,
                    "title": item.title,
                    "price": item.price,
                    "rating": item.rating,
                    "discountPercent": item.discount_percent,
                    "platform": item.source.value,
                }
                for item in items
            ],
            ensure_ascii=False,
            indent=2,
        )
        user = Template(self.prompt_loader.get_prompt(self.name, "user")).safe_substitute(
            products=products
        )
        return [
            {"role": "system", "content": self.prompt_loader.get_system_prompt(self.name)},
            {"role": "user", "content": user},
        ]

    def compare(self, items: Sequence[Item]) -> List[ComparisonVerdict]:
        """Verdicts for the first three items, or [] when anything goes wrong."""
        selected = list(items)[:MAX_COMPARED_ITEMS]
        if not selected:
            return []

        try:
            raw = self.llm.complete(self.build_messages(selected))
        except Exception:
            logger.exception("Comparison request failed")
            return []

        try:
            return parse_verdicts(raw, selected)
        except ComparisonFailure as exc:
            logger.warning("Discarding comparison: %s | raw=%r", exc.message, exc.raw_text)
            return []
