"""Ordered fallback strategies for recovering fields from markup.

Each field of an extractor is described by a list of small functions taking a
candidate node and returning a value or None. The first non-None value wins,
so a markup change only touches the strategy list of the affected field.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, TypeVar
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup, Tag

from .utils import normalize_whitespace

T = TypeVar("T")

Strategy = Callable[[Tag], Optional[T]]
NodeFinder = Callable[[BeautifulSoup], List[Tag]]


def first_match(strategies: Sequence[Strategy[T]], node: Tag) -> Optional[T]:
    """Run strategies in order and return the first non-None result."""
    for strategy in strategies:
        value = strategy(node)
        if value is not None:
            return value
    return None


def select_text(selector: str, min_length: int = 1) -> Strategy[str]:
    """Text of the first element matching ``selector``."""

    def strategy(node: Tag) -> Optional[str]:
        element = node.select_one(selector)
        if element is None:
            return None
        text = normalize_whitespace(element.get_text(" ", strip=True))
        return text if len(text) >= min_length else None

    return strategy


def select_attr(selector: str, *attributes: str, min_length: int = 1) -> Strategy[str]:
    """First non-empty attribute among ``attributes`` of the matching element."""

    def strategy(node: Tag) -> Optional[str]:
        element = node.select_one(selector)
        if element is None:
            return None
        for attribute in attributes:
            value = element.get(attribute)
            if isinstance(value, list):
                value = " ".join(value)
            if value and len(value.strip()) >= min_length:
                return value.strip()
        return None

    return strategy


def own_attr(attribute: str) -> Strategy[str]:
    """Attribute carried by the candidate node itself."""

    def strategy(node: Tag) -> Optional[str]:
        value = node.get(attribute)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    return strategy


def node_text(node: Tag) -> str:
    """Visible text of a node with separators between elements."""
    return normalize_whitespace(node.get_text(" ", strip=True))


def parsed(strategy: Strategy[str], parser: Callable[[str], Optional[T]]) -> Strategy[T]:
    """Chain a text strategy with a parser; parse failures fall through."""

    def wrapped(node: Tag) -> Optional[T]:
        raw = strategy(node)
        return parser(raw) if raw is not None else None

    return wrapped


def query_param(name: str) -> Callable[[Optional[str]], Optional[str]]:
    """Extract a query parameter from a URL."""

    def parser(url: Optional[str]) -> Optional[str]:
        if not url:
            return None
        values = parse_qs(urlparse(url).query).get(name)
        return values[0] if values and values[0] else None

    return parser


def select_all(selector: str) -> NodeFinder:
    """Node finder returning every element matching ``selector``."""

    def finder(soup: BeautifulSoup) -> List[Tag]:
        return list(soup.select(selector))

    return finder


def ancestors_with_attr(selector: str, attribute: str) -> NodeFinder:
    """Closest ancestor carrying ``attribute`` of every ``selector`` match."""

    def finder(soup: BeautifulSoup) -> List[Tag]:
        nodes: List[Tag] = []
        for element in soup.select(selector):
            parent = element.find_parent(attrs={attribute: True})
            # Tag equality is structural, compare identities instead.
            if parent is not None and all(parent is not seen for seen in nodes):
                nodes.append(parent)
        return nodes

    return finder
