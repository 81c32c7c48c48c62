"""Flipkart field extractor."""

from __future__ import annotations

from ..models import Source
from ..strategies import (
    ancestors_with_attr,
    node_text,
    own_attr,
    parsed,
    query_param,
    select_all,
    select_attr,
    select_text,
)
from ..utils import find_rupee_amount, to_percent, to_price, to_rating
from .base import BaseProductExtractor

PRODUCT_CARD_CLASSES = ".RGLWAk, .tUxRFH, ._75nlfW, ._1AtVbE"


class FlipkartExtractor(BaseProductExtractor):
    """Scrape Flipkart search results.

    Flipkart ships obfuscated class names that rotate every few months, so
    each field lists the current class first and older ones after it.
    """

    source = Source.FLIPKART
    base_url = "https://www.flipkart.com"
    search_url = "https://www.flipkart.com/search?q={query}"
    wait_selector = "div[data-id], .RGLWAk"

    node_strategies = (
        ("data-id", select_all("div[data-id]")),
        ("product-card", ancestors_with_attr(PRODUCT_CARD_CLASSES, "data-id")),
        ("product-link", select_all("a[href*='pid=']")),
    )
    sponsored_labels = ("Ad", "Sponsored")

    id_strategies = (
        own_attr("data-id"),
        parsed(select_attr("a[href*='pid=']", "href"), query_param("pid")),
        parsed(own_attr("href"), query_param("pid")),
    )
    title_strategies = (
        select_text(".pIpigb, .KzDlHZ, ._4rR01T, .s1Q9rs, ._2WkVRV, .IRpwS_", min_length=3),
        select_attr("a[title]", "title", min_length=3),
        select_attr("img", "alt", min_length=3),
    )
    link_strategies = (
        select_attr("a[href]", "href"),
        own_attr("href"),
    )
    image_strategies = (select_attr("img", "src", "data-src"),)
    price_strategies = (
        parsed(select_text(".hZ3P6w, ._30jeq3, ._16Jk6d, .Nx9bqj"), to_price),
        lambda node: find_rupee_amount(node_text(node)),
    )
    original_price_strategies = (
        parsed(select_text(".yRaY8j, ._3I9_wc, ._2p6lqe"), to_price),
    )
    rating_strategies = (
        parsed(select_text(".CjyrHS, ._3LWZlK, .XQDdHH"), to_rating),
    )
    discount_strategies = (
        parsed(
            select_text(".UkUFwK, ._3Ay6Sb, [class*='percent'], [class*='discount']"),
            to_percent,
        ),
    )

    feature_selectors = ("div._2cM9lP li", "li._7eSDEz", "ul._1xgFaf li")
    description_selectors = ("div._1mXcCf", "div._1AN87F")
