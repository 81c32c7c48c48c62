"""Client side of the isolated extraction process."""

from __future__ import annotations

import logging
import os
from contextlib import AsyncExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Protocol

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

logger = logging.getLogger("product_search.session")

# backend/app, so "python -m dealscout.mcp_servers" resolves without install.
APP_ROOT = Path(__file__).resolve().parents[3]


@dataclass(slots=True)
class ToolResponse:
    """Raw text returned by a tool and its transport-level error flag."""

    text: str
    is_error: bool = False


class ExtractionSession(Protocol):
    """What the executor needs from an extraction context."""

    async def __aenter__(self) -> "ExtractionSession": ...

    async def __aexit__(self, *exc_info: Any) -> Optional[bool]: ...

    async def list_tools(self) -> FrozenSet[str]: ...

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> ToolResponse: ...


class McpExtractionSession:
    """Spawn the extraction server as a subprocess and talk MCP over stdio.

    The process lives exactly as long as the ``async with`` block: leaving it,
    normally, by exception or by cancellation, terminates the subprocess.
    """

    def __init__(
        self,
        command: str,
        args: Optional[List[str]] = None,
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> None:
        self.parameters = StdioServerParameters(
            command=command,
            args=args if args is not None else ["-m", "dealscout.mcp_servers"],
            cwd=cwd or APP_ROOT,
            env=env if env is not None else dict(os.environ),
        )
        self._stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> "McpExtractionSession":
        stack = AsyncExitStack()
        try:
            read, write = await stack.enter_async_context(stdio_client(self.parameters))
            session = await stack.enter_async_context(ClientSession(read, write))
            await session.initialize()
        except BaseException:
            await stack.aclose()
            raise
        self._stack = stack
        self._session = session
        logger.debug("Extraction process started: %s", self.parameters.command)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        stack, self._stack, self._session = self._stack, None, None
        if stack is not None:
            await stack.aclose()
            logger.debug("Extraction process stopped.")

    async def list_tools(self) -> FrozenSet[str]:
        result = await self._require_session().list_tools()
        return frozenset(tool.name for tool in result.tools)

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> ToolResponse:
        result = await self._require_session().call_tool(name, arguments)
        text = "".join(
            block.text for block in result.content if getattr(block, "type", None) == "text"
        )
        return ToolResponse(text=text, is_error=bool(result.isError))

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError("Extraction session used outside 'async with'.")
        return self._session
