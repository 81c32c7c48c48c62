"""Error taxonomy for the product search pipeline."""

from __future__ import annotations

from typing import Optional


class ProductSearchError(RuntimeError):
    """Base class for every failure raised by the search pipeline."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ProductSearchError):
    """Raised when the caller input is malformed (missing or invalid query)."""


class PlanParseError(ProductSearchError):
    """Raised when the planner output cannot be turned into a plan."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class UnknownToolError(PlanParseError):
    """Raised when a plan step references a tool nobody registered."""

    def __init__(self, tool: str, raw_text: str = "") -> None:
        super().__init__(f"Unknown tool '{tool}' in plan.", raw_text)
        self.tool = tool


class PlanExecutionError(ProductSearchError):
    """Generic failure surfaced to callers when a plan cannot be executed."""

    DEFAULT_MESSAGE = "Failed to execute plan."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE)


class ExtractionFailure(ProductSearchError):
    """Raised when a single source cannot be extracted."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(message)
        self.source = source


class ComparisonFailure(ProductSearchError):
    """Raised when the comparison output is malformed."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text
