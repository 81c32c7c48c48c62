"""MCP server exposing the product extraction tools over stdio.

Run standalone: python -m dealscout.mcp_servers
"""

import json
import logging
from typing import Any, Dict, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from dealscout.configs import settings
from dealscout.services.product_search.errors import ProductSearchError
from dealscout.services.product_search.models import ExtractionRequest, Source
from dealscout.services.product_search.page_loader import create_page_loader
from dealscout.services.product_search.scraper import ProductScraper
from dealscout.services.product_search.tools import (
    PRODUCT_DETAILS,
    PRODUCT_DETAILS_SCHEMA,
    PRODUCT_SCRAPER,
    PRODUCT_SCRAPER_SCHEMA,
)

logger = logging.getLogger("product_search.server")


def error_payload(message: str) -> Dict[str, Any]:
    return {"items": [], "count": 0, "error": message}


async def handle_tool_call(
    scraper: ProductScraper, name: str, arguments: Dict[str, Any]
) -> Dict[str, Any]:
    """Execute one tool call and return its JSON payload.

    Failures are reported with an ``error`` key rather than raised, so the
    caller always receives a decodable payload.
    """
    logger.info("Calling tool: %s with args: %s", name, arguments)

    if name == PRODUCT_SCRAPER:
        try:
            request = ExtractionRequest.from_arguments(arguments)
            return await scraper.scrape(request)
        except ProductSearchError as exc:
            logger.warning("Scraper failed: %s", exc.message)
            return error_payload(exc.message)
        except Exception as exc:
            logger.exception("An error occurred during scraping")
            return error_payload(str(exc))

    if name == PRODUCT_DETAILS:
        url = arguments.get("url")
        platform = arguments.get("platform")
        if not isinstance(url, str) or platform not in {s.value for s in Source}:
            return {"error": "Arguments 'url' and 'platform' are required."}
        try:
            details = await scraper.details(url, platform)
        except Exception as exc:
            logger.exception("Details scraping failed for %s", url)
            return {"error": str(exc)}
        return details.to_dict()

    return {"error": f"Unknown tool: {name}"}


def create_server(scraper: Optional[ProductScraper] = None) -> Server:
    """Create and configure the MCP server."""
    server = Server("dealscout-extraction")
    scraper = scraper or ProductScraper(
        loader_factory=lambda: create_page_loader(settings),
        source_timeout=settings.SOURCE_TIMEOUT_SECONDS,
    )

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name=PRODUCT_SCRAPER,
                description=(
                    "Tool to get product information from Amazon.in and Flipkart.com. "
                    "Accepts a product search term."
                ),
                inputSchema=PRODUCT_SCRAPER_SCHEMA,
            ),
            Tool(
                name=PRODUCT_DETAILS,
                description=(
                    "Scrape detailed product information from a specific Amazon "
                    "or Flipkart URL."
                ),
                inputSchema=PRODUCT_DETAILS_SCHEMA,
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Execute a tool and return results."""
        payload = await handle_tool_call(scraper, name, arguments or {})
        return [TextContent(type="text", text=json.dumps(payload, ensure_ascii=False))]

    return server


async def run_server() -> None:
    """Run the MCP server using stdio transport."""
    server = create_server()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )
