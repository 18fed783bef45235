from __future__ import annotations

from typing import Annotated, List

from mcp.server.fastmcp.prompts.base import AssistantMessage, Message, UserMessage
from pydantic import Field

from .registry import PromptDefinition, PromptHandler, PromptRegistry
from .tools.document_checklist import NAME as CHECKLIST_TOOL
from .tools.funding_options import NAME as FUNDING_OPTIONS_TOOL


async def check_funding_documents(
    funding_programme_name: Annotated[
        str, Field(description="The name or partial name of the funding programme to check documents for")
    ],
) -> List[Message]:
    return [
        UserMessage(
            f"Use the {FUNDING_OPTIONS_TOOL} tool to retrieve the available funding options and look for the "
            f"slug of the closest match to {funding_programme_name}.\n"
            f"Then use the {CHECKLIST_TOOL} tool to find the required documents for the programme."
        ),
        AssistantMessage("Do you want me to look at the content of the documents?"),
        UserMessage("No, only look at the filename of the documents. Do not get the content of the documents."),
    ]


async def organize_funding_documents(
    funding_programme_name: Annotated[
        str, Field(description="The name or partial name of the funding programme to organize documents for")
    ],
) -> List[Message]:
    return [
        UserMessage(
            "Select the documents that match the required documents and create a folder with the name of the "
            f"funding programme ({funding_programme_name}). Copy the files inside and give meaningful "
            "filenames to the documents."
        ),
    ]


def build_prompt_registry() -> PromptRegistry:
    prompts = [
        PromptHandler(
            definition=PromptDefinition(
                name="check-funding-documents",
                title="Check Funding Documents",
                description=(
                    "Guided workflow to check whether you have the documents needed to apply to a funding "
                    "programme: identify the programme, then compare against its document checklist."
                ),
            ),
            invoke=check_funding_documents,
        ),
        PromptHandler(
            definition=PromptDefinition(
                name="organize-funding-documents",
                title="Organize Funding Documents",
                description=(
                    "Guided workflow to organise the documents of a funding programme application into a "
                    "folder with meaningful filenames."
                ),
            ),
            invoke=organize_funding_documents,
        ),
    ]
    return {prompt.definition.name: prompt for prompt in prompts}
