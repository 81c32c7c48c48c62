"""Names and input schemas of the extraction tools."""

from __future__ import annotations

from typing import Any, Dict

from .models import SOURCE_SELECTORS, Source

PRODUCT_SCRAPER = "product-scraper"
PRODUCT_DETAILS = "product-details"

# Tools a plan may reference; product-details is called directly.
PLAN_TOOLS = frozenset({PRODUCT_SCRAPER})

PRODUCT_SCRAPER_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "search": {
            "type": "string",
            "description": "Search term for the product (e.g., 'gaming keyboard')",
        },
        "limit": {
            "type": "number",
            "description": "Limit number of results per platform (default 5)",
        },
        "minPrice": {"type": "number", "description": "Minimum price (INR)"},
        "maxPrice": {"type": "number", "description": "Maximum price (INR)"},
        "minRating": {"type": "number", "description": "Minimum rating (e.g. 4.0)"},
        "platform": {
            "type": "string",
            "enum": list(SOURCE_SELECTORS),
            "description": "Platform to scrape from (default: all)",
        },
    },
    "required": ["search"],
}

PRODUCT_DETAILS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "url": {"type": "string", "description": "The full URL of the product page."},
        "platform": {
            "type": "string",
            "enum": [source.value for source in Source],
            "description": "The platform source.",
        },
    },
    "required": ["url", "platform"],
}
