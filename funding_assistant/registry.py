"""
Registries of MCP tools, resources and prompts.

Each handler pairs a static definition with an ``invoke`` coroutine. FastMCP
derives the input schema from the ``invoke`` signature, so parameters must be
annotated. ``register_all`` wires every registry into a FastMCP server.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

logger = logging.getLogger("funding_assistant.registry")

Handler = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    title: str
    description: str
    annotations: Optional[ToolAnnotations] = None


@dataclass(frozen=True)
class ToolHandler:
    definition: ToolDefinition
    invoke: Handler


@dataclass(frozen=True)
class ResourceDefinition:
    name: str
    uri: str
    title: str
    description: str
    mime_type: str = "application/json"


@dataclass(frozen=True)
class ResourceHandler:
    definition: ResourceDefinition
    invoke: Handler


@dataclass(frozen=True)
class PromptDefinition:
    name: str
    title: str
    description: str


@dataclass(frozen=True)
class PromptHandler:
    definition: PromptDefinition
    invoke: Handler


ToolRegistry = Dict[str, ToolHandler]
ResourceRegistry = Dict[str, ResourceHandler]
PromptRegistry = Dict[str, PromptHandler]


def read_only_annotations(title: str) -> ToolAnnotations:
    return ToolAnnotations(
        title=title,
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )


def register_tools(mcp: FastMCP, tools: ToolRegistry) -> None:
    for tool in tools.values():
        definition = tool.definition
        mcp.add_tool(
            tool.invoke,
            name=definition.name,
            title=definition.title,
            description=definition.description,
            annotations=definition.annotations,
        )


def register_resources(mcp: FastMCP, resources: ResourceRegistry) -> None:
    # Static URIs and templates share one decorator; FastMCP tells them apart
    # by the "{param}" placeholders.
    for resource in resources.values():
        definition = resource.definition
        mcp.resource(
            definition.uri,
            name=definition.name,
            title=definition.title,
            description=definition.description,
            mime_type=definition.mime_type,
        )(resource.invoke)


def register_prompts(mcp: FastMCP, prompts: PromptRegistry) -> None:
    for prompt in prompts.values():
        definition = prompt.definition
        mcp.prompt(
            name=definition.name,
            title=definition.title,
            description=definition.description,
        )(prompt.invoke)


def register_all(
    mcp: FastMCP,
    tools: Optional[ToolRegistry] = None,
    resources: Optional[ResourceRegistry] = None,
    prompts: Optional[PromptRegistry] = None,
) -> None:
    if tools:
        register_tools(mcp, tools)
    if resources:
        register_resources(mcp, resources)
    if prompts:
        register_prompts(mcp, prompts)
    logger.debug(
        f"Registered {len(tools or {})} tools, {len(resources or {})} resources, {len(prompts or {})} prompts"
    )
