from __future__ import annotations

import asyncio

import httpx
from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client

from _common import MCP_URL, auth_headers


async def main() -> None:
    health_url = MCP_URL.rsplit("/mcp", 1)[0] + "/health"
    async with httpx.AsyncClient(timeout=5.0) as client:
        response = await client.get(health_url)
        print(f"GET {health_url} -> {response.status_code} {response.text}")

    print(f"Connecting to MCP server at {MCP_URL}...")
    async with streamablehttp_client(MCP_URL, headers=auth_headers()) as (read_stream, write_stream, _):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()

            tools = await session.list_tools()
            print(f"Found {len(tools.tools)} tools:")
            for tool in tools.tools:
                print(f" - {tool.name}")

            print("Calling get-funding-options for health check...")
            result = await session.call_tool("get-funding-options", {"page": 1, "limit": 1})
            if result.isError:
                print("get-funding-options FAILED")
            else:
                print("get-funding-options OK")
            for content in result.content:
                print(getattr(content, "text", content))


if __name__ == "__main__":
    asyncio.run(main())
