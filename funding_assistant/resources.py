from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict

from mcp.shared.exceptions import McpError
from mcp.types import INVALID_PARAMS, ErrorData

from .errors import raise_for_error
from .models import FundingOptionQuery
from .registry import ResourceDefinition, ResourceHandler, ResourceRegistry

if TYPE_CHECKING:
    from .context import AppContext

FUNDING_OPTIONS_URI = "funding-options://list"
FUNDING_DOCUMENTS_URI = "funding-documents://{slug}"
FUNDING_TEMPLATES_URI = "funding-templates://{template_type}"

# Page served by the funding options directory resource
DIRECTORY_QUERY = FundingOptionQuery(page=1, limit=10)

APPLICATION_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "business-plan": {
        "title": "Business Plan Template",
        "sections": [
            "Executive Summary",
            "Company Description",
            "Market Analysis",
            "Financial Projections",
            "Management Team",
        ],
        "description": "Standard business plan template for funding applications",
    },
    "financial-projections": {
        "title": "Financial Projections Template",
        "sections": [
            "Revenue Forecast",
            "Expense Budget",
            "Cash Flow Statement",
            "Break-even Analysis",
        ],
        "description": "Financial projections template for grant applications",
    },
    "project-proposal": {
        "title": "Project Proposal Template",
        "sections": [
            "Project Overview",
            "Objectives and Goals",
            "Methodology",
            "Timeline",
            "Budget",
            "Expected Outcomes",
        ],
        "description": "General project proposal template",
    },
}


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def funding_options_resource(app: AppContext) -> ResourceHandler:
    async def funding_options_directory() -> str:
        result = await app.client.list_funding_options(DIRECTORY_QUERY)
        page = raise_for_error(result, resource="funding-options", uri=FUNDING_OPTIONS_URI)
        return _to_json(page.model_dump(by_alias=True))

    return ResourceHandler(
        definition=ResourceDefinition(
            name="funding-options",
            uri=FUNDING_OPTIONS_URI,
            title="Funding Options Directory",
            description=(
                "Directory of available funding opportunities including grants, loans and investment "
                "programmes, with their names, descriptions, funders and slugs. Start here to explore "
                "funding options."
            ),
        ),
        invoke=funding_options_directory,
    )


def funding_documents_resource(app: AppContext) -> ResourceHandler:
    async def funding_programme_documents(slug: str) -> str:
        result = await app.aggregator.get_checklist_for_programme(slug)
        checklist = raise_for_error(result, resource="funding-documents", uri=f"funding-documents://{slug}")
        return _to_json(checklist.model_dump(by_alias=True))

    return ResourceHandler(
        definition=ResourceDefinition(
            name="funding-documents",
            uri=FUNDING_DOCUMENTS_URI,
            title="Funding Programme Documents",
            description=(
                "Document checklist of a funding programme, addressed by the programme's slug. Lists "
                "every required document type with its description and requirements."
            ),
        ),
        invoke=funding_programme_documents,
    )


def get_application_template(template_type: str) -> Dict[str, Any]:
    template = APPLICATION_TEMPLATES.get(template_type)
    if template is None:
        raise McpError(
            ErrorData(
                code=INVALID_PARAMS,
                message=f"Template type '{template_type}' not found",
                data={"type": template_type, "availableTypes": sorted(APPLICATION_TEMPLATES)},
            )
        )
    return template


def funding_templates_resource() -> ResourceHandler:
    async def application_document_template(template_type: str) -> str:
        return _to_json(get_application_template(template_type))

    return ResourceHandler(
        definition=ResourceDefinition(
            name="funding-templates",
            uri=FUNDING_TEMPLATES_URI,
            title="Application Document Templates",
            description=(
                "Document templates for common funding application requirements: business plan, "
                "financial projections and project proposal structures."
            ),
        ),
        invoke=application_document_template,
    )


def build_resource_registry(app: AppContext) -> ResourceRegistry:
    resources = [
        funding_documents_resource(app),
        funding_options_resource(app),
        funding_templates_resource(),
    ]
    return {resource.definition.name: resource for resource in resources}
