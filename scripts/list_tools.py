from __future__ import annotations

import asyncio

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client

from _common import MCP_URL, auth_headers


async def main() -> None:
    async with streamablehttp_client(MCP_URL, headers=auth_headers()) as (read_stream, write_stream, _):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            tools_result = await session.list_tools()
            print("Available tools:")
            for tool in tools_result.tools:
                print(f"- {tool.name}: {tool.description}")

            resources_result = await session.list_resources()
            templates_result = await session.list_resource_templates()
            print("Available resources:")
            for resource in resources_result.resources:
                print(f"- {resource.uri}: {resource.description}")
            for template in templates_result.resourceTemplates:
                print(f"- {template.uriTemplate}: {template.description}")

            prompts_result = await session.list_prompts()
            print("Available prompts:")
            for prompt in prompts_result.prompts:
                print(f"- {prompt.name}: {prompt.description}")


if __name__ == "__main__":
    asyncio.run(main())
