from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Dict

from pydantic import Field

from ..errors import raise_for_error
from ..models import FundingOptionQuery
from ..registry import ToolDefinition, ToolHandler, read_only_annotations

if TYPE_CHECKING:
    from ..context import AppContext

NAME = "get-funding-options"


def get_funding_options_tool(app: AppContext) -> ToolHandler:
    async def get_funding_options(
        page: Annotated[int, Field(ge=1, description="Page number, starting at 1")] = 1,
        limit: Annotated[int, Field(ge=1, le=100, description="Number of funding options per page")] = 10,
    ) -> Dict[str, Any]:
        result = await app.client.list_funding_options(FundingOptionQuery(page=page, limit=limit))
        funding_options = raise_for_error(result, tool=NAME, page=page, limit=limit)
        return funding_options.model_dump(by_alias=True)

    return ToolHandler(
        definition=ToolDefinition(
            name=NAME,
            title="Get Funding Options",
            description=(
                "Retrieve available funding opportunities with their name, description, funder and slug. "
                "Use this tool when users need to explore available grants, funds or financing "
                "opportunities, or to find the slug of a funding programme."
            ),
            annotations=read_only_annotations("Funding Opportunities Search Engine"),
        ),
        invoke=get_funding_options,
    )
