"""Turn untrusted planner output into a validated, executable plan."""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from dealscout.services.product_search.errors import (
    PlanParseError,
    UnknownToolError,
    ValidationError,
)
from dealscout.services.product_search.models import (
    DEFAULT_POLICY,
    ExtractionRequest,
    Plan,
    PlanStep,
    SearchPolicy,
)
from dealscout.services.product_search.tools import PLAN_TOOLS

logger = logging.getLogger("product_search.plan_interpreter")

FENCED_BLOCK = re.compile(r"```[A-Za-z0-9_-]*\s*(.*?)\s*```", re.DOTALL)
SUPERLATIVES = ("best", "top", "finest", "greatest", "leading", "premium", "ultimate")
SUPERLATIVE_PATTERN = re.compile(r"\b(?:" + "|".join(SUPERLATIVES) + r")\b", re.IGNORECASE)
WRAPPER_KEYS = ("plan", "steps", "tools")


def strip_wrapping(raw: str) -> str:
    """Remove markdown fences around the payload, if any."""
    match = FENCED_BLOCK.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


def parse_plan_payload(raw: str) -> List[Dict[str, Any]]:
    """Decode the planner text into a list of step objects.

    Accepts a JSON array, an object wrapping the array under one of
    ``WRAPPER_KEYS`` or a single step object. Anything else is rejected.
    """
    text = strip_wrapping(raw or "")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"Planner output is not valid JSON: {exc.msg}", raw) from exc

    if isinstance(payload, dict):
        wrapped = next(
            (payload[key] for key in WRAPPER_KEYS if isinstance(payload.get(key), list)),
            None,
        )
        payload = wrapped if wrapped is not None else [payload]

    if not isinstance(payload, list):
        raise PlanParseError("Planner output is not a list of steps.", raw)
    if not payload:
        raise PlanParseError("Planner output has no steps.", raw)
    for index, step in enumerate(payload):
        if not isinstance(step, dict) or not isinstance(step.get("tool"), str):
            raise PlanParseError(f"Step {index} has no tool identifier.", raw)
    return payload


def has_superlative(query: str) -> bool:
    return SUPERLATIVE_PATTERN.search(query or "") is not None


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def display_limit_hint(step: Mapping[str, Any]) -> Optional[int]:
    """Display limit carried by a step, either on the step or in its args."""
    hint = step.get("displayLimit")
    if hint is None and isinstance(step.get("args"), Mapping):
        hint = step["args"].get("displayLimit")
    return _as_int(hint)


def resolve_display_limit(
    hint: Optional[int], query: str, policy: SearchPolicy = DEFAULT_POLICY
) -> int:
    """Apply the superlative cap and clamp to the allowed range.

    A missing or non-positive hint means the default display limit.
    """
    limit = hint if hint is not None and hint >= policy.min_display_limit else None
    if limit is None:
        limit = policy.default_display_limit
    if has_superlative(query):
        limit = min(limit, policy.superlative_display_cap)
    return max(policy.min_display_limit, min(limit, policy.max_display_limit))


def apply_price_floor(
    arguments: Mapping[str, Any], policy: SearchPolicy = DEFAULT_POLICY
) -> Dict[str, Any]:
    """Synthesize minPrice from maxPrice when only an upper bound is given."""
    resolved = dict(arguments)
    try:
        max_price = float(resolved.get("maxPrice"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return resolved
    min_price = resolved.get("minPrice")
    try:
        has_min = min_price is not None and float(min_price) > 0
    except (TypeError, ValueError):
        return resolved
    if max_price > 0 and not has_min:
        resolved["minPrice"] = max_price * policy.price_floor_ratio
    return resolved


def interpret_plan(
    raw: str,
    query: str,
    known_tools: FrozenSet[str] = PLAN_TOOLS,
    policy: SearchPolicy = DEFAULT_POLICY,
) -> Plan:
    """Validate planner output against the registered tools and the query.

    Raises:
        PlanParseError: the text is not a usable plan.
        UnknownToolError: a step names a tool that is not registered; the
            whole plan is rejected.
    """
    payload = parse_plan_payload(raw)

    for step in payload:
        if step["tool"] not in known_tools:
            raise UnknownToolError(step["tool"], raw)

    display_limit = resolve_display_limit(display_limit_hint(payload[0]), query, policy)

    steps: List[PlanStep] = []
    for index, step in enumerate(payload):
        arguments = step.get("args") or {}
        if not isinstance(arguments, Mapping):
            raise PlanParseError(f"Step {index} args must be an object.", raw)
        try:
            request = ExtractionRequest.from_arguments(
                apply_price_floor(arguments, policy), policy
            )
        except ValidationError as exc:
            raise PlanParseError(f"Step {index} has invalid args: {exc.message}", raw) from exc
        steps.append(
            PlanStep(
                tool=step["tool"],
                request=request,
                display_limit_hint=display_limit_hint(step),
            )
        )

    logger.info(
        "Plan resolved: %d steps, displayLimit=%d for query '%s'",
        len(steps),
        display_limit,
        query,
    )
    return Plan(steps=steps, display_limit=display_limit)
