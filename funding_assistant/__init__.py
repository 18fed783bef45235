"""
MCP server exposing funding options and document checklists from the
funding data service.

Tools:
    - get-funding-options
    - get-document-checklist-for-funding-programme

Resources:
    - funding-options://list
    - funding-documents://{slug}
    - funding-templates://{template_type}

Prompts:
    - check-funding-documents
    - organize-funding-documents

Usage:
    from funding_assistant.server import create_server
"""

__version__ = "1.0.0"
