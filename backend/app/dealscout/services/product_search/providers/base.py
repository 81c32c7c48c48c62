"""Base classes for product field extractors."""

from __future__ import annotations

import logging
from abc import ABC
from typing import ClassVar, List, Optional, Sequence, Set, Tuple
from urllib.parse import quote_plus, urljoin

from bs4 import BeautifulSoup, Tag

from ..filters import PRICE_FILTER, RATING_FILTER, rejection_reason
from ..models import (
    DEFAULT_POLICY,
    ExtractionBatch,
    ExtractionDiagnostics,
    ExtractionRequest,
    Item,
    ProductDetails,
    SearchPolicy,
    Source,
)
from ..strategies import NodeFinder, Strategy, first_match
from ..utils import discount_percent, looks_blocked, normalize_whitespace, plausible_price

logger = logging.getLogger("product_search.extractor")

MIN_TITLE_LENGTH = 3


class BaseProductExtractor(ABC):
    """Recover item records from a search results page of one source.

    Subclasses only declare ordered strategy lists; the cascade, per-item
    isolation, filtering and diagnostics live here.
    """

    source: ClassVar[Source]
    base_url: ClassVar[str]
    search_url: ClassVar[str]
    wait_selector: ClassVar[str]

    node_strategies: ClassVar[Sequence[Tuple[str, NodeFinder]]] = ()
    sponsored_selectors: ClassVar[Sequence[str]] = ()
    sponsored_labels: ClassVar[Sequence[str]] = ("Sponsored",)
    deal_badge_selectors: ClassVar[Sequence[str]] = ()

    id_strategies: ClassVar[Sequence[Strategy[str]]] = ()
    title_strategies: ClassVar[Sequence[Strategy[str]]] = ()
    link_strategies: ClassVar[Sequence[Strategy[str]]] = ()
    image_strategies: ClassVar[Sequence[Strategy[str]]] = ()
    price_strategies: ClassVar[Sequence[Strategy[float]]] = ()
    original_price_strategies: ClassVar[Sequence[Strategy[float]]] = ()
    rating_strategies: ClassVar[Sequence[Strategy[float]]] = ()
    discount_strategies: ClassVar[Sequence[Strategy[float]]] = ()

    feature_selectors: ClassVar[Sequence[str]] = ()
    description_selectors: ClassVar[Sequence[str]] = ()

    def __init__(self, policy: SearchPolicy = DEFAULT_POLICY) -> None:
        self.policy = policy

    def build_search_url(self, search: str) -> str:
        return self.search_url.format(query=quote_plus(search))

    def extract(self, html: str, request: ExtractionRequest) -> ExtractionBatch:
        """Parse a loaded results page into qualifying items.

        Items failing the request filters never occupy a slot of the limit.
        An error while parsing one candidate node is recorded and the batch
        continues with the next node.
        """
        soup = BeautifulSoup(html, "html.parser")
        diagnostics = ExtractionDiagnostics(
            source=self.source.value, blocked=looks_blocked(html)
        )
        if diagnostics.blocked:
            logger.warning("%s: possible captcha/bot detection page.", self.source.value)

        nodes = self._candidate_nodes(soup, diagnostics)
        limit = request.effective_limit(self.policy)
        items: List[Item] = []
        seen: Set[Tuple[str, str]] = set()

        for node in nodes:
            if len(items) >= limit:
                break
            diagnostics.processed += 1
            try:
                item = self._parse_node(node, diagnostics)
            except Exception as exc:
                label = node.get("data-asin") or node.get("data-id") or "unknown"
                diagnostics.item_errors.append(f"Item[{label}]: {exc}")
                logger.debug("%s item error", self.source.value, exc_info=True)
                continue
            if item is None:
                continue

            reason = rejection_reason(item, request)
            if reason == PRICE_FILTER:
                diagnostics.skipped_price_filter += 1
                continue
            if reason == RATING_FILTER:
                diagnostics.skipped_rating_filter += 1
                continue

            if item.key in seen:
                diagnostics.skipped_duplicate += 1
                continue
            seen.add(item.key)
            items.append(item)

        if not items:
            logger.info(
                "No results found on %s for '%s'.", self.source.value, request.search
            )
        logger.info("%s diagnostics: %s", self.source.value, diagnostics.to_dict())
        return ExtractionBatch(items=items, diagnostics=diagnostics)

    def extract_details(self, html: str) -> ProductDetails:
        """Read feature bullets and description from a product detail page."""
        soup = BeautifulSoup(html, "html.parser")
        features: List[str] = []
        for selector in self.feature_selectors:
            for element in soup.select(selector):
                text = normalize_whitespace(element.get_text(" ", strip=True))
                if text and text not in features:
                    features.append(text)
            if features:
                break

        description = ""
        for selector in self.description_selectors:
            element = soup.select_one(selector)
            if element is not None:
                description = normalize_whitespace(element.get_text(" ", strip=True))
            if description:
                break
        return ProductDetails(features=features, description=description)

    def _candidate_nodes(
        self, soup: BeautifulSoup, diagnostics: ExtractionDiagnostics
    ) -> List[Tag]:
        for name, finder in self.node_strategies:
            nodes = finder(soup)
            logger.debug("%s node strategy %s: %d nodes", self.source.value, name, len(nodes))
            if nodes:
                diagnostics.node_strategy = name
                diagnostics.node_count = len(nodes)
                return nodes
        return []

    def _parse_node(
        self, node: Tag, diagnostics: ExtractionDiagnostics
    ) -> Optional[Item]:
        item_id = first_match(self.id_strategies, node)
        if not item_id:
            diagnostics.skipped_no_id += 1
            return None

        if self._is_sponsored(node):
            diagnostics.skipped_sponsored += 1
            return None

        title = first_match(self.title_strategies, node)
        if not title or len(title) < MIN_TITLE_LENGTH:
            diagnostics.skipped_no_title += 1
            return None

        link = first_match(self.link_strategies, node)
        price = self._plausible(first_match(self.price_strategies, node))
        original_price = self._plausible(
            first_match(self.original_price_strategies, node)
        )
        discount = first_match(self.discount_strategies, node)
        if discount is None:
            discount = discount_percent(original_price, price)

        has_badge = any(
            node.select_one(selector) is not None
            for selector in self.deal_badge_selectors
        )
        is_deal = has_badge or (
            discount is not None and discount > self.policy.deal_discount_threshold
        )

        return Item(
            id=item_id,
            title=title,
            url=urljoin(self.base_url, link) if link else "",
            source=self.source,
            image=first_match(self.image_strategies, node),
            price=price,
            original_price=original_price,
            rating=first_match(self.rating_strategies, node),
            discount_percent=discount,
            is_deal=is_deal,
        )

    def _plausible(self, value: Optional[float]) -> Optional[float]:
        return plausible_price(
            value, self.policy.min_plausible_price, self.policy.max_plausible_price
        )

    def _is_sponsored(self, node: Tag) -> bool:
        if any(
            node.select_one(selector) is not None
            for selector in self.sponsored_selectors
        ):
            return True
        labels = set(self.sponsored_labels)
        return node.find(string=lambda text: bool(text) and text.strip() in labels) is not None
