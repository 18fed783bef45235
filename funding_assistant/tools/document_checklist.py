from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Dict

from pydantic import Field

from ..errors import raise_for_error
from ..registry import ToolDefinition, ToolHandler, read_only_annotations

if TYPE_CHECKING:
    from ..context import AppContext

NAME = "get-document-checklist-for-funding-programme"


def get_document_checklist_tool(app: AppContext) -> ToolHandler:
    async def get_document_checklist_for_funding_programme(
        slug: Annotated[str, Field(description="Slug of a funding programme, as returned by get-funding-options")],
    ) -> Dict[str, Any]:
        result = await app.aggregator.get_checklist_for_programme(slug)
        checklist = raise_for_error(result, tool=NAME, slug=slug)
        return checklist.model_dump(by_alias=True)

    return ToolHandler(
        definition=ToolDefinition(
            name=NAME,
            title="Get Document Checklist for Funding Programme",
            description=(
                "List the documents required to apply to a funding programme. Each entry has the "
                "document type name, its description and any specific requirements."
            ),
            annotations=read_only_annotations("Funding Programme Document Checklist"),
        ),
        invoke=get_document_checklist_for_funding_programme,
    )
