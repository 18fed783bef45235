"""
Document checklist aggregation for a funding programme.

Resolves a programme slug to its funding option, loads the option's first
document checklist and enriches every item with the name and description of
its document master definition.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .client import FundingApiClient
from .errors import ApiError, ErrorKind, Result
from .models import (
    FUNDING_OPTION_ORIGIN,
    AggregatedChecklist,
    DocumentChecklist,
    DocumentChecklistItem,
    DocumentChecklistQuery,
    DocumentMasterDefinition,
    DocumentMasterDefinitionQuery,
    EnrichedChecklistItem,
)

logger = logging.getLogger("funding_assistant.checklist")

PROPAGATED_KINDS = frozenset({ErrorKind.UNAUTHORIZED, ErrorKind.TRANSPORT_ERROR})


class ChecklistAggregator:
    def __init__(self, client: FundingApiClient, propagate_api_errors: bool = False) -> None:
        self.client = client
        self.propagate_api_errors = propagate_api_errors

    async def get_checklist_for_programme(self, slug: str) -> Result[AggregatedChecklist]:
        """
        Build the enriched document checklist for the programme ``slug``.

        The three remote calls run strictly in sequence. A failed slug lookup
        yields FUNDING_OPTION_NOT_FOUND and a failed or empty checklist lookup
        yields DOCUMENT_CHECKLIST_NOT_FOUND, unless ``propagate_api_errors`` is
        set and the failure was UNAUTHORIZED or TRANSPORT_ERROR. A failed
        definitions lookup only leaves the items unenriched.
        """
        funding_option = await self.client.find_funding_option_by_slug(slug)
        if isinstance(funding_option, ApiError) or funding_option is None:
            return self._not_found(ErrorKind.FUNDING_OPTION_NOT_FOUND, funding_option, f"slug={slug}")

        checklist_page = await self.client.list_document_checklists(
            DocumentChecklistQuery(
                origin_type=FUNDING_OPTION_ORIGIN,
                origin_ref_id=funding_option.funding_option_id,
            )
        )
        if isinstance(checklist_page, ApiError) or not checklist_page.checklists:
            return self._not_found(
                ErrorKind.DOCUMENT_CHECKLIST_NOT_FOUND,
                checklist_page if isinstance(checklist_page, ApiError) else None,
                f"fundingOptionId={funding_option.funding_option_id}",
            )

        # First wins when the service returns several checklists.
        checklist = checklist_page.checklists[0]
        definitions = await self._load_definitions(checklist)
        return AggregatedChecklist(
            **checklist.model_dump(exclude={"items"}),
            items=[self._enrich(item, definitions.get(item.document_master_definition_id)) for item in checklist.items],
        )

    def _not_found(self, kind: ErrorKind, cause: Optional[ApiError], detail: str) -> ApiError:
        if cause is not None and self.propagate_api_errors and cause.kind in PROPAGATED_KINDS:
            logger.warning(f"Propagating {cause.kind.value} ({detail})", extra={"status": cause.kind.value})
            return cause
        if cause is not None:
            logger.info(f"Collapsing {cause.kind.value} into {kind.value} ({detail})", extra={"status": kind.value})
        return ApiError(kind, cause=cause, detail=detail)

    async def _load_definitions(self, checklist: DocumentChecklist) -> Dict[str, DocumentMasterDefinition]:
        ids: List[str] = list(dict.fromkeys(item.document_master_definition_id for item in checklist.items))
        if not ids:
            return {}
        page = await self.client.list_document_master_definitions(DocumentMasterDefinitionQuery(ids=ids))
        if isinstance(page, ApiError):
            logger.warning(
                f"Document definitions unavailable for checklist {checklist.document_checklist_id}, "
                f"returning items without document type details: {page}",
                extra={"operation": "list_document_master_definitions", "status": page.kind.value},
            )
            return {}
        return {definition.document_master_definition_id: definition for definition in page.definitions}

    @staticmethod
    def _enrich(item: DocumentChecklistItem, definition: Optional[DocumentMasterDefinition]) -> EnrichedChecklistItem:
        # Unknown item fields from the service are carried over unchanged.
        return EnrichedChecklistItem(
            **item.model_dump(),
            document_type_name=definition.name if definition else "",
            document_type_description=definition.description if definition else "",
        )
