"""
Read-only projections of the funding data service entities.

Attributes are snake_case; the wire format is camelCase, so serialise with
``model_dump(by_alias=True)``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

FUNDING_OPTION_ORIGIN = "FundingOption"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # The service sends null for unset optional fields; required fields still reject it.
        if value is None and info.field_name:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return value


class Page(ApiModel):
    page: int = Field(default=1, description="Current page")
    total_records: int = Field(default=0, description="Number of total records")
    total_pages: int = Field(default=0, description="Number of total pages")


class Funder(ApiModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(default="", description="Name of the funder")
    slug: str = Field(default="", description="Slug of the funder")


class FundingOption(ApiModel):
    # Published payloads disagree on field names; unknown fields are kept as-is.
    model_config = ConfigDict(extra="allow")

    funding_option_id: str = Field(
        validation_alias=AliasChoices("fundingOptionId", "id", "funding_option_id"),
        serialization_alias="fundingOptionId",
        description="Unique funding option id",
    )
    name: str = Field(default="", description="Name of funding programme")
    short_name: str = Field(default="", description="Short name or abbreviation of funding programme")
    description: str = Field(default="", description="Description of funding programme")
    slug: str = Field(default="", description="Slug of funding programme")
    funder: Optional[Funder] = None
    links: Dict[str, Any] = Field(
        default_factory=dict,
        description="Relevant urls of useful resources about this funding programme",
    )


class FundingOptionQuery(ApiModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class FundingOptionPage(Page):
    funding_options: List[FundingOption] = Field(default_factory=list)


class DocumentRequirement(ApiModel):
    content: str = Field(default="", description="Description of a specific requirement of this document")


class DocumentChecklistItem(ApiModel):
    model_config = ConfigDict(extra="allow")

    document_master_definition_id: str = Field(description="Unique id of a document type")
    requirements: List[DocumentRequirement] = Field(default_factory=list)


class DocumentChecklist(ApiModel):
    model_config = ConfigDict(extra="allow")

    document_checklist_id: str = Field(description="Unique id of document checklist")
    name: str = Field(default="", description="Name of document checklist")
    items: List[DocumentChecklistItem] = Field(default_factory=list)


class DocumentChecklistQuery(ApiModel):
    origin_type: str
    origin_ref_id: str


class DocumentChecklistPage(Page):
    checklists: List[DocumentChecklist] = Field(default_factory=list)


class DocumentMasterDefinition(ApiModel):
    document_master_definition_id: str = Field(description="Unique id of document master definition")
    name: str = Field(default="", description="Name of document type")
    description: str = Field(default="", description="Description of document type")


class DocumentMasterDefinitionQuery(ApiModel):
    ids: List[str] = Field(default_factory=list)


class DocumentMasterDefinitionPage(ApiModel):
    definitions: List[DocumentMasterDefinition] = Field(default_factory=list)


class EnrichedChecklistItem(DocumentChecklistItem):
    document_type_name: str = Field(default="", description="Descriptive name of this document type")
    document_type_description: str = Field(default="", description="Description of this document type")


class AggregatedChecklist(ApiModel):
    """A document checklist whose items carry their document type name and description."""

    model_config = ConfigDict(extra="allow")

    document_checklist_id: str
    name: str
    items: List[EnrichedChecklistItem] = Field(default_factory=list)
