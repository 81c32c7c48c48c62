"""Price/rating filtering and deduplication of extracted items."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set, Tuple

from .models import ExtractionRequest, Item

logger = logging.getLogger("product_search.filters")

PRICE_FILTER = "price"
RATING_FILTER = "rating"


def rejection_reason(item: Item, request: ExtractionRequest) -> Optional[str]:
    """Return which filter rejects the item, or None when it qualifies.

    The price filter runs first. An item without price only passes when no
    price bound was requested; likewise for rating and the rating floor.
    """
    if request.has_price_bounds:
        if item.price is None:
            return PRICE_FILTER
        if not request.min_price <= item.price <= request.max_price:
            return PRICE_FILTER

    if request.has_rating_floor:
        if item.rating is None or item.rating < request.min_rating:
            return RATING_FILTER

    return None


def filter_items(items: Iterable[Item], request: ExtractionRequest) -> List[Item]:
    """Keep the items that satisfy the request bounds, preserving order."""
    return [item for item in items if rejection_reason(item, request) is None]


def deduplicate(items: Iterable[Item]) -> List[Item]:
    """Drop repeated (source, id) pairs; the first occurrence wins."""
    seen: Set[Tuple[str, str]] = set()
    unique: List[Item] = []
    for item in items:
        if item.key in seen:
            logger.debug("Duplicate item dropped: %s/%s", *item.key)
            continue
        seen.add(item.key)
        unique.append(item)
    return unique
