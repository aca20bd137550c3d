"""HTTP client for the AgentRecall broker."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from agentrecall.config import DEFAULT_BROKER_URL
from agentrecall.schemas import (
    CapabilityDescription,
    CleanupResponse,
    DelegationResult,
    EngineStats,
    HealthResponse,
    IngestResponse,
    RetrieveResponse,
    WorkflowSummary,
)

logger = logging.getLogger(__name__)

# Timeouts
BROKER_TIMEOUT = 10.0  # seconds


class BrokerUnavailableError(Exception):
    """Raised when the broker cannot be reached."""

    pass


class BrokerClient:
    """Thin synchronous wrapper over the broker's JSON endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_BROKER_URL,
        timeout: float = BROKER_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        """Send a request and decode the JSON body.

        Raises:
            BrokerUnavailableError: If the broker cannot be reached
            httpx.HTTPStatusError: If the broker answers with an error status
        """
        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = client.request(method, path, json=payload)
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            logger.warning(f"Broker unreachable at {self.base_url}: {e}")
            raise BrokerUnavailableError(f"Broker unreachable at {self.base_url}: {e}") from e

        response.raise_for_status()
        return response.json()

    def retrieve(self, query: str, include_correlation: bool = False) -> RetrieveResponse:
        data = self._request(
            "POST",
            "/retrieve",
            {"query": query, "include_correlation": include_correlation},
        )
        return RetrieveResponse.model_validate(data)

    def record_delegation(self, result: DelegationResult) -> IngestResponse:
        data = self._request("POST", "/context/delegation", result.model_dump(mode="json"))
        return IngestResponse.model_validate(data)

    def record_workflow(self, workflow: WorkflowSummary) -> IngestResponse:
        data = self._request("POST", "/context/workflow", workflow.model_dump(mode="json"))
        return IngestResponse.model_validate(data)

    def record_capability(self, capability: CapabilityDescription) -> IngestResponse:
        data = self._request("POST", "/context/capability", capability.model_dump(mode="json"))
        return IngestResponse.model_validate(data)

    def stats(self) -> EngineStats:
        return EngineStats.model_validate(self._request("GET", "/stats"))

    def cleanup(self, max_age_ms: int) -> CleanupResponse:
        data = self._request("POST", "/cleanup", {"max_age_ms": max_age_ms})
        return CleanupResponse.model_validate(data)

    def health(self) -> HealthResponse:
        return HealthResponse.model_validate(self._request("GET", "/health"))
