from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from .checklist import ChecklistAggregator
from .client import FundingApiClient
from .config import Settings
from .observability import InMemoryMetrics

logger = logging.getLogger("funding_assistant.context")


class AppContext:
    """
    Services shared by every MCP session of one server process.

    The HTTP client is opened when the first session starts and closed when
    the last one ends. A client passed in by the caller is used as-is and
    never closed here.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[FundingApiClient] = None,
        metrics: Optional[InMemoryMetrics] = None,
    ) -> None:
        self.settings = settings
        self.metrics = metrics or InMemoryMetrics()
        self._client = client
        self._owns_client = client is None
        self._sessions = 0
        self._lock = asyncio.Lock()

    @property
    def client(self) -> FundingApiClient:
        if self._client is None:
            raise RuntimeError("Funding API client is only available inside a server session")
        return self._client

    @property
    def aggregator(self) -> ChecklistAggregator:
        return ChecklistAggregator(self.client, propagate_api_errors=self.settings.api.propagate_api_errors)

    @asynccontextmanager
    async def session(self) -> AsyncIterator["AppContext"]:
        async with self._lock:
            if self._client is None:
                if not self.settings.api.api_key:
                    logger.warning(
                        "FLUENTLAB_API_KEY not set. Calls to the funding data service will fail with 401."
                    )
                self._client = FundingApiClient(self.settings.api, metrics=self.metrics)
            self._sessions += 1
        try:
            yield self
        finally:
            async with self._lock:
                self._sessions -= 1
                if self._sessions == 0 and self._owns_client and self._client is not None:
                    client, self._client = self._client, None
                    await client.aclose()
