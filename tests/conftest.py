"""
Shared fixtures: an in-process fake of the funding data service served
through httpx.MockTransport, and clients wired to it.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Type, Union

import httpx
import pytest

from funding_assistant.client import FundingApiClient, build_http_client
from funding_assistant.config import ApiSettings, ServerSettings, Settings
from funding_assistant.observability import InMemoryMetrics

BASE_URL = "https://funding.test/exp/sme-exp"

Failure = Union[int, Type[httpx.HTTPError]]


class FakeFundingService:
    """Routes the four read endpoints to in-memory data and records every request."""

    def __init__(self) -> None:
        self.funding_options: Dict[str, Dict[str, Any]] = {}
        self.checklists: Dict[str, List[Dict[str, Any]]] = {}
        self.definitions: Dict[str, Dict[str, Any]] = {}
        # endpoint path suffix -> HTTP status or httpx exception class
        self.failures: Dict[str, Failure] = {}
        self.requests: List[httpx.Request] = []

    @property
    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def fail(self, endpoint: str, failure: Failure) -> None:
        self.failures[endpoint] = failure

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for endpoint, failure in self.failures.items():
            if endpoint in path:
                if isinstance(failure, int):
                    return httpx.Response(failure, json={"message": "failure"})
                raise failure("simulated failure", request=request)

        params = request.url.params
        if "/mcp/funding-options/slug/" in path:
            option = self.funding_options.get(path.rsplit("/", 1)[-1])
            if option is None:
                return httpx.Response(404, json={"message": "Not found"})
            return httpx.Response(200, json=option)
        if path.endswith("/mcp/funding-options"):
            options = list(self.funding_options.values())
            return httpx.Response(
                200,
                json={
                    "page": int(params.get("page", 1)),
                    "totalRecords": len(options),
                    "totalPages": 1,
                    "fundingOptions": options[: int(params.get("limit", 10))],
                },
            )
        if path.endswith("/mcp/document-checklists"):
            checklists = self.checklists.get(params.get("originRefId", ""), [])
            return httpx.Response(
                200,
                json={"page": 1, "totalRecords": len(checklists), "totalPages": 1, "checklists": checklists},
            )
        if path.endswith("/mcp/document-master-definitions"):
            ids = params.get_list("ids[]")
            return httpx.Response(
                200,
                json={"definitions": [self.definitions[i] for i in ids if i in self.definitions]},
            )
        return httpx.Response(404, json={"message": "Not found"})


def green_tech_service() -> FakeFundingService:
    service = FakeFundingService()
    service.funding_options["green-tech-grant-2024"] = {
        "fundingOptionId": "fo_123",
        "name": "Green Tech Grant 2024",
        "shortName": "GTG",
        "description": "Grants for green technology projects",
        "slug": "green-tech-grant-2024",
        "funder": {"name": "Climate Fund", "slug": "climate-fund"},
        "links": {"website": "https://funder.test/green-tech"},
    }
    service.checklists["fo_123"] = [
        {
            "documentChecklistId": "cl_1",
            "name": "Green Tech Checklist",
            "items": [
                {"documentMasterDefinitionId": "d1", "requirements": [{"content": "must be signed"}]},
            ],
        }
    ]
    service.definitions["d1"] = {
        "documentMasterDefinitionId": "d1",
        "name": "Business Registration",
        "description": "...",
    }
    return service


@pytest.fixture
def api_settings() -> ApiSettings:
    return ApiSettings(base_url=BASE_URL, api_key="test-key", timeout=2.0)


@pytest.fixture
def settings(api_settings: ApiSettings) -> Settings:
    return Settings(api=api_settings, server=ServerSettings(log_level="DEBUG"))


@pytest.fixture
def service() -> FakeFundingService:
    return green_tech_service()


@pytest.fixture
def make_client(api_settings: ApiSettings) -> Callable[..., FundingApiClient]:
    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        settings: Optional[ApiSettings] = None,
        metrics: Optional[InMemoryMetrics] = None,
    ) -> FundingApiClient:
        settings = settings or api_settings
        http_client = build_http_client(settings, transport=httpx.MockTransport(handler))
        return FundingApiClient(settings, http_client=http_client, metrics=metrics)

    return _make
