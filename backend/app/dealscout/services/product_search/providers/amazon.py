"""Amazon India field extractor."""

from __future__ import annotations

from ..models import Source
from ..strategies import node_text, own_attr, parsed, select_all, select_attr, select_text
from ..utils import find_rupee_amount, to_price, to_rating
from .base import BaseProductExtractor


class AmazonExtractor(BaseProductExtractor):
    """Scrape Amazon.in search results."""

    source = Source.AMAZON
    base_url = "https://www.amazon.in"
    search_url = "https://www.amazon.in/s?k={query}"
    wait_selector = "div[data-asin], .s-result-item"

    node_strategies = (
        ("s-search-result", select_all('div[data-component-type="s-search-result"]')),
        ("data-asin", select_all('div[data-asin]:not([data-asin=""])')),
        ("s-result-item", select_all(".s-result-item[data-asin]")),
    )
    sponsored_selectors = (
        '[data-component-type="s-sponsored-result"]',
        ".s-sponsored-label-info-icon",
        ".puis-sponsored-label-text",
    )
    deal_badge_selectors = (".a-badge-text",)

    id_strategies = (own_attr("data-asin"),)
    title_strategies = (
        select_text("h2", min_length=3),
        select_text(
            ".a-size-medium, .a-size-base-plus, .a-text-normal, [class*='title']",
            min_length=3,
        ),
    )
    link_strategies = (
        select_attr("a[href*='/dp/']", "href"),
        select_attr("a[href*='/gp/']", "href"),
        select_attr("h2 a", "href"),
    )
    image_strategies = (
        select_attr("img.s-image", "src", "data-src"),
        select_attr("img[src*='images-amazon']", "src", "data-src"),
    )
    price_strategies = (
        # The whole-part element holds only digits and the separators.
        parsed(select_text(".a-price:not(.a-text-price) .a-price-whole"), to_price),
        parsed(select_text(".a-price:not(.a-text-price) .a-offscreen"), find_rupee_amount),
        lambda node: find_rupee_amount(node_text(node)),
    )
    original_price_strategies = (
        parsed(select_text(".a-price.a-text-price .a-offscreen"), find_rupee_amount),
        parsed(select_text(".a-text-strike"), find_rupee_amount),
    )
    rating_strategies = (
        parsed(select_text(".a-icon-alt"), to_rating),
        parsed(select_attr("[aria-label*='out of 5']", "aria-label"), to_rating),
        parsed(select_text("i.a-icon-star"), to_rating),
    )

    feature_selectors = ("#feature-bullets li span.a-list-item", "#feature-bullets li")
    description_selectors = ("#productDescription", "#feature-bullets")
