"""Deal scoring and ranking of an aggregated item set."""

from __future__ import annotations

from typing import Iterable, List

from .models import DEFAULT_POLICY, Item, SearchPolicy

DISCOUNT_WEIGHT = 0.6
RATING_WEIGHT = 8


def deal_score(item: Item) -> float:
    """discountPercent * 0.6 + rating * 8, missing values counting as zero."""
    discount = item.discount_percent or 0.0
    rating = item.rating or 0.0
    return discount * DISCOUNT_WEIGHT + rating * RATING_WEIGHT


def rank_items(
    items: Iterable[Item], policy: SearchPolicy = DEFAULT_POLICY
) -> List[Item]:
    """Score, stable-sort by descending score and flag the best deals.

    Only the first ``policy.best_deal_count`` items can be flagged, and only
    when their score is strictly above ``policy.best_deal_threshold``.
    """
    ranked = list(items)
    for item in ranked:
        item.deal_score = deal_score(item)
        item.is_best_deal = False

    # list.sort is stable, so ties keep their incoming order.
    ranked.sort(key=lambda item: item.deal_score or 0.0, reverse=True)

    for item in ranked[: policy.best_deal_count]:
        item.is_best_deal = (item.deal_score or 0.0) > policy.best_deal_threshold
    return ranked
