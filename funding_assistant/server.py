from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Iterable, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.lowlevel.helper_types import ReadResourceContents
from pydantic import AnyUrl

from .config import Settings, load_settings
from .context import AppContext
from .errors import find_mcp_error
from .observability import setup_logger
from .prompts import build_prompt_registry
from .registry import register_all
from .resources import build_resource_registry
from .tools import build_tool_registry

INSTRUCTIONS = """
Funding Assistant - explore funding programmes and the documents needed to apply.

1. Call `get-funding-options` to list programmes and find the slug of the one you need.
2. Call `get-document-checklist-for-funding-programme` with that slug to get the
   required document types, their descriptions and specific requirements.

The same data is available as resources (`funding-options://list`,
`funding-documents://{slug}`), and the `check-funding-documents` and
`organize-funding-documents` prompts walk through common workflows.
"""


class FundingMCP(FastMCP):
    """
    FastMCP that lets ``McpError`` raised by a handler reach the caller.

    FastMCP wraps handler exceptions in ``ToolError`` / ``ValueError``, which
    drops the JSON-RPC error code chosen by ``raise_for_error``.
    """

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        try:
            return await super().call_tool(name, arguments)
        except Exception as exc:
            mcp_error = find_mcp_error(exc)
            if mcp_error is None:
                raise
            raise mcp_error from None

    async def read_resource(self, uri: AnyUrl | str) -> Iterable[ReadResourceContents]:
        try:
            return await super().read_resource(uri)
        except Exception as exc:
            mcp_error = find_mcp_error(exc)
            if mcp_error is None:
                raise
            raise mcp_error from None


def create_server(
    settings: Optional[Settings] = None,
    context: Optional[AppContext] = None,
) -> FundingMCP:
    """
    Build a FastMCP server with every funding tool, resource and prompt registered.

    Args:
        settings: Server and API settings; loaded from config/env when omitted.
        context: Shared services. Pass one to reuse its client and metrics
            (the HTTP app does this to expose metrics).
    """
    settings = settings or (context.settings if context else load_settings())
    logger = setup_logger(settings.server.log_level)
    app_ctx = context or AppContext(settings)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
        async with app_ctx.session() as ctx:
            yield ctx

    mcp = FundingMCP(
        settings.server.name,
        instructions=INSTRUCTIONS,
        lifespan=lifespan,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level,
    )
    register_all(
        mcp,
        tools=build_tool_registry(app_ctx),
        resources=build_resource_registry(app_ctx),
        prompts=build_prompt_registry(),
    )
    logger.debug(f"MCP server '{settings.server.name}' created", extra={"operation": "create_server"})
    return mcp
