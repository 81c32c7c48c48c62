"""Entry point of the extraction process.

Usage: python -m dealscout.mcp_servers
"""

# Logging goes to stderr before other imports touch it.
from dealscout.mcp_servers import configure_mcp_logging

configure_mcp_logging()

import asyncio  # noqa: E402

from dealscout.mcp_servers.product_server import run_server  # noqa: E402

if __name__ == "__main__":
    asyncio.run(run_server())
