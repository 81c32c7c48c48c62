"""Domain models for product search results."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .errors import ValidationError


class Source(str, Enum):
    """Known e-commerce sites an item can be scraped from."""

    AMAZON = "amazon"
    FLIPKART = "flipkart"


ALL_SOURCES = "all"
SOURCE_SELECTORS = (ALL_SOURCES, *(source.value for source in Source))


@dataclass(frozen=True)
class SearchPolicy:
    """Product policy knobs shared by every stage of a search.

    Attributes:
        default_limit: Items gathered per source when the plan does not say.
        limit_floor: Lowest per-source extraction limit ever used. Requested
            limits below 1 are raised to 1 first, then to this floor.
        default_display_limit: Display limit used when the plan gives none.
        min_display_limit: Lower bound of the display limit.
        max_display_limit: Upper bound of the display limit.
        superlative_display_cap: Display limit cap for "best"/"top" queries.
        price_floor_ratio: Fraction of ``maxPrice`` synthesized as minimum
            price when a plan only gives an upper bound.
        best_deal_count: How many top-ranked items may carry the best-deal flag.
        best_deal_threshold: Score an item must exceed to be a best deal.
        deal_discount_threshold: Discount percent above which an item is a deal.
        min_plausible_price: Prices at or below this value are parsing noise.
        max_plausible_price: Prices above this value are parsing noise.
    """

    default_limit: int = 5
    limit_floor: int = 5
    default_display_limit: int = 5
    min_display_limit: int = 1
    max_display_limit: int = 5
    superlative_display_cap: int = 3
    price_floor_ratio: float = 0.5
    best_deal_count: int = 3
    best_deal_threshold: float = 10.0
    deal_discount_threshold: float = 20.0
    min_plausible_price: float = 0.0
    max_plausible_price: float = 10_000_000.0


DEFAULT_POLICY = SearchPolicy()


def _coerce_float(value: Any, name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"'{name}' must be a number.")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"'{name}' must be a number.") from exc
    if not math.isfinite(number):
        raise ValidationError(f"'{name}' must be a number.")
    return number


@dataclass(frozen=True)
class ExtractionRequest:
    """Arguments of one extraction call, with documented defaults.

    ``max_price`` defaults to infinity, meaning no upper bound. A price bound
    counts as requested when ``min_price`` is positive or ``max_price`` finite.
    """

    search: str
    limit: int = DEFAULT_POLICY.default_limit
    min_price: float = 0.0
    max_price: float = math.inf
    min_rating: float = 0.0
    platform: str = ALL_SOURCES

    def __post_init__(self) -> None:
        if not isinstance(self.search, str) or not self.search.strip():
            raise ValidationError("Search term is required.")
        if self.platform not in SOURCE_SELECTORS:
            raise ValidationError(f"Unknown platform '{self.platform}'.")
        if self.limit < 1:
            raise ValidationError("'limit' must be at least 1.")
        if self.min_price < 0 or self.max_price < 0:
            raise ValidationError("Price bounds cannot be negative.")
        if self.min_price > self.max_price:
            raise ValidationError("'minPrice' cannot exceed 'maxPrice'.")
        if not 0 <= self.min_rating <= 5:
            raise ValidationError("'minRating' must be between 0 and 5.")

    @property
    def has_price_bounds(self) -> bool:
        return self.min_price > 0 or math.isfinite(self.max_price)

    @property
    def has_rating_floor(self) -> bool:
        return self.min_rating > 0

    def effective_limit(self, policy: SearchPolicy = DEFAULT_POLICY) -> int:
        """Per-source limit actually used during extraction."""
        return max(self.limit, policy.limit_floor)

    def sources(self) -> List[Source]:
        if self.platform == ALL_SOURCES:
            return list(Source)
        return [Source(self.platform)]

    def to_arguments(self) -> Dict[str, Any]:
        """Serialize to the tool-call argument shape (camelCase)."""
        arguments: Dict[str, Any] = {
            "search": self.search,
            "limit": self.limit,
            "minPrice": self.min_price,
            "minRating": self.min_rating,
            "platform": self.platform,
        }
        if math.isfinite(self.max_price):
            arguments["maxPrice"] = self.max_price
        return arguments

    @classmethod
    def from_arguments(
        cls,
        arguments: Mapping[str, Any],
        policy: SearchPolicy = DEFAULT_POLICY,
    ) -> "ExtractionRequest":
        """Build a request from tool-call arguments, applying defaults."""
        search = arguments.get("search")
        if not isinstance(search, str):
            raise ValidationError("Search term is required.")

        limit = _coerce_float(arguments.get("limit"), "limit")
        min_price = _coerce_float(arguments.get("minPrice"), "minPrice")
        max_price = _coerce_float(arguments.get("maxPrice"), "maxPrice")
        min_rating = _coerce_float(arguments.get("minRating"), "minRating")
        platform = arguments.get("platform") or ALL_SOURCES
        if not isinstance(platform, str):
            raise ValidationError("'platform' must be a string.")

        return cls(
            search=search.strip(),
            limit=max(int(limit), 1) if limit is not None else policy.default_limit,
            min_price=min_price or 0.0,
            max_price=max_price if max_price is not None else math.inf,
            min_rating=min_rating or 0.0,
            platform=platform.lower(),
        )


@dataclass(slots=True)
class Item:
    """Single product scraped from a source site."""

    id: str
    title: str
    url: str
    source: Source
    image: Optional[str] = None
    price: Optional[float] = None
    original_price: Optional[float] = None
    rating: Optional[float] = None
    discount_percent: Optional[float] = None
    is_deal: bool = False
    is_best_deal: bool = False
    deal_score: Optional[float] = None

    @property
    def key(self) -> tuple[str, str]:
        """Deduplication key: (source site, site-scoped identifier)."""
        return (self.source.value, self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "image": self.image,
            "price": self.price,
            "salePrice": self.price,
            "originalPrice": self.original_price,
            "rating": self.rating,
            "discountPercent": self.discount_percent,
            "platform": self.source.value,
            "isDeal": self.is_deal,
            "isBestDeal": self.is_best_deal,
            "dealScore": self.deal_score,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Item":
        price = data.get("price")
        if price is None:
            price = data.get("salePrice")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            url=str(data.get("url") or ""),
            source=Source(data.get("platform") or data.get("source")),
            image=data.get("image"),
            price=price,
            original_price=data.get("originalPrice"),
            rating=data.get("rating"),
            discount_percent=data.get("discountPercent"),
            is_deal=bool(data.get("isDeal", False)),
            is_best_deal=bool(data.get("isBestDeal", False)),
            deal_score=data.get("dealScore"),
        )


@dataclass(slots=True)
class ExtractionDiagnostics:
    """Side-channel counters describing what one extractor skipped and why."""

    source: str
    node_strategy: Optional[str] = None
    node_count: int = 0
    processed: int = 0
    skipped_no_id: int = 0
    skipped_sponsored: int = 0
    skipped_no_title: int = 0
    skipped_duplicate: int = 0
    skipped_price_filter: int = 0
    skipped_rating_filter: int = 0
    item_errors: List[str] = field(default_factory=list)
    blocked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "nodeStrategy": self.node_strategy,
            "nodeCount": self.node_count,
            "processed": self.processed,
            "skipNoId": self.skipped_no_id,
            "skipSponsored": self.skipped_sponsored,
            "skipNoTitle": self.skipped_no_title,
            "skipDuplicate": self.skipped_duplicate,
            "skipPriceFilter": self.skipped_price_filter,
            "skipRatingFilter": self.skipped_rating_filter,
            "itemErrors": list(self.item_errors),
            "blocked": self.blocked,
        }


@dataclass(slots=True)
class ExtractionBatch:
    """Items recovered from one page plus the diagnostics of the run."""

    items: List[Item]
    diagnostics: ExtractionDiagnostics


@dataclass(slots=True)
class PlanStep:
    """One tool invocation of a plan."""

    tool: str
    request: ExtractionRequest
    display_limit_hint: Optional[int] = None


@dataclass(slots=True)
class Plan:
    """Validated, executable plan with its resolved display limit."""

    steps: List[PlanStep]
    display_limit: int


@dataclass(slots=True)
class ResultSet:
    """Ranked items of one request, split at the display limit."""

    items: List[Item]
    display_limit: int
    held_back_items: List[Item] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def total_available(self) -> int:
        return len(self.items) + len(self.held_back_items)

    @property
    def has_more(self) -> bool:
        return bool(self.held_back_items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "count": self.count,
            "displayLimit": self.display_limit,
            "hasMore": self.has_more,
            "heldBackItems": [item.to_dict() for item in self.held_back_items],
            "totalAvailable": self.total_available,
        }


@dataclass(slots=True)
class ComparisonVerdict:
    """Qualitative pros/cons of one compared item."""

    item_id: str
    pros: List[str] = field(default_factory=list)
    cons: List[str] = field(default_factory=list)
    best_for: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.item_id,
            "pros": list(self.pros),
            "cons": list(self.cons),
            "bestFor": self.best_for,
        }


@dataclass(slots=True)
class ProductDetails:
    """Feature bullets and description read from a detail page."""

    features: List[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"features": list(self.features), "description": self.description}
