from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from .config import ApiSettings
from .errors import ApiError, ErrorKind, Result
from .models import (
    DocumentChecklistPage,
    DocumentChecklistQuery,
    DocumentMasterDefinitionPage,
    DocumentMasterDefinitionQuery,
    FundingOption,
    FundingOptionPage,
    FundingOptionQuery,
)
from .observability import InMemoryMetrics

logger = logging.getLogger("funding_assistant.client")

ModelT = TypeVar("ModelT", bound=BaseModel)


def build_http_client(
    settings: ApiSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if settings.api_key:
        headers["Authorization"] = f"Bearer {settings.api_key}"
    return httpx.AsyncClient(
        base_url=settings.base_url,
        headers=headers,
        timeout=httpx.Timeout(settings.timeout),
        follow_redirects=False,
        transport=transport,
    )


class FundingApiClient:
    """
    Read-only client for the funding data service.

    Every operation issues exactly one GET and returns either the parsed
    entity or an ``ApiError``:

    - HTTP 401 -> UNAUTHORIZED
    - any other HTTP-layer failure (network, timeout, non-2xx) -> TRANSPORT_ERROR
    - anything else (bad JSON, unexpected payload shape) -> UNKNOWN_ERROR

    There are no retries and no caching.
    """

    def __init__(
        self,
        settings: ApiSettings,
        http_client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[InMemoryMetrics] = None,
    ) -> None:
        self.settings = settings
        self.http_client = http_client or build_http_client(settings)
        self.metrics = metrics

    async def __aenter__(self) -> "FundingApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def _get(
        self,
        operation: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Result[Any]:
        start = time.perf_counter()
        error: Optional[ApiError] = None
        data: Any = None
        try:
            response = await self.http_client.get(path, params=params)
            response.raise_for_status()
            data = response.json() if response.content else None
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            kind = ErrorKind.UNAUTHORIZED if status == 401 else ErrorKind.TRANSPORT_ERROR
            error = ApiError(kind, cause=exc, detail=f"{operation} returned HTTP {status}")
        except httpx.HTTPError as exc:
            error = ApiError(ErrorKind.TRANSPORT_ERROR, cause=exc, detail=f"{operation}: {type(exc).__name__}")
        except Exception as exc:
            error = ApiError(ErrorKind.UNKNOWN_ERROR, cause=exc, detail=f"{operation}: {type(exc).__name__}")

        duration_ms = (time.perf_counter() - start) * 1000.0
        if self.metrics is not None:
            self.metrics.record(operation, duration_ms, error=error is not None)
        status_label = error.kind.value if error else "ok"
        log = logger.warning if error else logger.debug
        log(
            f"GET {path} {status_label}",
            extra={"operation": operation, "status": status_label, "duration_ms": round(duration_ms, 2)},
        )
        return error if error is not None else data

    @staticmethod
    def _parse(model: Type[ModelT], operation: str, data: Any) -> Result[ModelT]:
        try:
            return model.model_validate(data)
        except Exception as exc:
            logger.warning(
                f"Unexpected payload from {operation}: {exc}",
                extra={"operation": operation, "status": ErrorKind.UNKNOWN_ERROR.value},
            )
            return ApiError(ErrorKind.UNKNOWN_ERROR, cause=exc, detail=f"{operation}: invalid payload")

    async def list_funding_options(self, query: FundingOptionQuery) -> Result[FundingOptionPage]:
        data = await self._get(
            "list_funding_options",
            "mcp/funding-options",
            params=query.model_dump(by_alias=True),
        )
        if isinstance(data, ApiError):
            return data
        return self._parse(FundingOptionPage, "list_funding_options", data)

    async def find_funding_option_by_slug(self, slug: str) -> Result[Optional[FundingOption]]:
        data = await self._get(
            "find_funding_option_by_slug",
            f"mcp/funding-options/slug/{quote(slug, safe='')}",
        )
        if isinstance(data, ApiError):
            return data
        if not data:
            return None
        return self._parse(FundingOption, "find_funding_option_by_slug", data)

    async def list_document_checklists(self, query: DocumentChecklistQuery) -> Result[DocumentChecklistPage]:
        data = await self._get(
            "list_document_checklists",
            "mcp/document-checklists",
            params=query.model_dump(by_alias=True),
        )
        if isinstance(data, ApiError):
            return data
        return self._parse(DocumentChecklistPage, "list_document_checklists", data)

    async def list_document_master_definitions(
        self,
        query: DocumentMasterDefinitionQuery,
    ) -> Result[DocumentMasterDefinitionPage]:
        # Array parameters use the bracket convention: ids[]=a&ids[]=b
        data = await self._get(
            "list_document_master_definitions",
            "mcp/document-master-definitions",
            params={"ids[]": list(query.ids)},
        )
        if isinstance(data, ApiError):
            return data
        return self._parse(DocumentMasterDefinitionPage, "list_document_master_definitions", data)
