from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Dict

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client

from _common import MCP_URL, auth_headers


async def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python scripts/call_tool.py <tool_name> ['<json-args>']")
        print("Example: python scripts/call_tool.py get-document-checklist-for-funding-programme "
              "'{\"slug\": \"green-tech-grant-2024\"}'")
        raise SystemExit(1)

    tool_name = sys.argv[1]
    raw_args = sys.argv[2] if len(sys.argv) > 2 else "{}"

    try:
        params: Dict[str, Any] = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        print("Failed to parse JSON arguments")
        print(repr(exc))
        raise SystemExit(1)

    async with streamablehttp_client(MCP_URL, headers=auth_headers()) as (read_stream, write_stream, _):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            result = await session.call_tool(tool_name, params)
            if result.isError:
                print("Tool call failed:")
            else:
                print("Tool call result:")
            for content in result.content:
                print(getattr(content, "text", content))


if __name__ == "__main__":
    asyncio.run(main())
