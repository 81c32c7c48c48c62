"""Utilities shared by product extractors."""

from __future__ import annotations

import math
import re
from typing import Optional


DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
        "image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}

RUPEE_AMOUNT = re.compile(r"₹\s*([\d,]+(?:\.\d+)?)")
PERCENT_OFF = re.compile(r"(\d+)\s*%")
RATING_OUT_OF = re.compile(r"(\d+(?:\.\d+)?)\s*out of")
FIRST_NUMBER = re.compile(r"\d+(?:\.\d+)?")

BLOCK_MARKERS = ("captcha", "robot check", "automated access")


def normalize_whitespace(value: str) -> str:
    """Collapse repeated spaces and newlines."""
    return re.sub(r"\s+", " ", value).strip()


def to_price(price_text: str | None) -> Optional[float]:
    """Best effort conversion of Indian price strings ("₹1,23,499.00") to float.

    Commas are always thousands separators and the dot is the decimal mark.
    """
    if not price_text:
        return None

    cleaned = re.sub(r"[^\d\.]", "", price_text)
    # "1,299." from ".a-price-whole" keeps a trailing separator dot.
    cleaned = cleaned.strip(".")
    if not cleaned or cleaned.count(".") > 1:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def find_rupee_amount(text: str | None) -> Optional[float]:
    """Return the first ₹-prefixed amount found in free text."""
    if not text:
        return None
    match = RUPEE_AMOUNT.search(text)
    if not match:
        return None
    return to_price(match.group(1))


def to_rating(rating_text: str | None) -> Optional[float]:
    """Parse "4.2 out of 5 stars" or a bare "4.2" into a float."""
    if not rating_text:
        return None
    match = RATING_OUT_OF.search(rating_text) or FIRST_NUMBER.search(rating_text)
    if not match:
        return None
    rating = float(match.group(1) if match.re is RATING_OUT_OF else match.group(0))
    if not 0 <= rating <= 5:
        return None
    return rating


def plausible_price(
    value: Optional[float], lower: float, upper: float
) -> Optional[float]:
    """Discard prices outside the (lower, upper] range as parsing artifacts."""
    if value is None or math.isnan(value):
        return None
    if value <= lower or value > upper:
        return None
    return value


def discount_percent(
    original_price: Optional[float], sale_price: Optional[float]
) -> Optional[float]:
    """Percentage saved, rounded half up, only when the list price is higher."""
    if not original_price or not sale_price or original_price <= sale_price:
        return None
    return float(math.floor((original_price - sale_price) / original_price * 100 + 0.5))


def looks_blocked(html: str) -> bool:
    """Heuristic check for captcha and bot-detection pages."""
    lowered = html.lower()
    return any(marker in lowered for marker in BLOCK_MARKERS)


def to_percent(text: str | None) -> Optional[float]:
    """Parse "23% off" into 23.0."""
    if not text:
        return None
    match = PERCENT_OFF.search(text)
    if not match:
        return None
    value = float(match.group(1))
    return value if 0 < value < 100 else None
