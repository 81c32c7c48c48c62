"""MCP server hosting the isolated extraction process."""

import logging
import sys


def configure_mcp_logging() -> None:
    """Send every log record to stderr.

    MCP uses stdout for JSON-RPC, so this must run before anything logs.
    """
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=True,
    )
    logging.getLogger("mcp").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
