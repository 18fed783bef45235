"""
Tool modules, one per MCP tool.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from ..registry import ToolRegistry
from .document_checklist import get_document_checklist_tool
from .funding_options import get_funding_options_tool

if TYPE_CHECKING:
    from ..context import AppContext


def build_tool_registry(app: AppContext) -> ToolRegistry:
    tools = [get_funding_options_tool(app), get_document_checklist_tool(app)]
    return {tool.definition.name: tool for tool in tools}
