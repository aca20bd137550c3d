"""Pydantic schemas for AgentRecall context entries and broker contracts."""

from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentrecall.query_cache import QueryCacheStats

# Age-based purge default: 7 days
DEFAULT_MAX_AGE_MS = 7 * 24 * 60 * 60 * 1000


def current_time_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_entry_id() -> str:
    """Generate an opaque, never-reused context entry id."""
    return f"ctx-{uuid.uuid4().hex}"


class ContextCategory(str, Enum):
    """Kinds of stored context."""

    DELEGATION = "delegation"
    TASK_RESULT = "task_result"
    WORKFLOW = "workflow"
    AGENT_CAPABILITY = "agent_capability"
    ERROR_RESOLUTION = "error_resolution"


class WorkflowStatus(str, Enum):
    """Lifecycle state reported for a multi-agent workflow."""

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


# --- Stored Context ---


class ContextMetadata(BaseModel):
    """Metadata attached to a context entry."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(default_factory=current_time_ms, ge=0, description="Creation time (epoch ms)")
    agent_type: str | None = None
    task_id: str | None = None
    workflow_id: str | None = None
    relevance_score: float | None = Field(
        default=None,
        description="Caller-supplied prior added verbatim to the search score",
    )
    tags: tuple[str, ...] = ()

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(tags))


class ContextEntry(BaseModel):
    """One unit of prior knowledge the retrieval engine can return."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_entry_id)
    content: str
    source: str
    category: ContextCategory
    metadata: ContextMetadata = Field(default_factory=ContextMetadata)


class SearchOptions(BaseModel):
    """Bonus filters and bounds for a store search."""

    type: ContextCategory | None = None
    agent_type: str | None = None
    tags: list[str] = Field(default_factory=list)
    limit: int = Field(default=10, ge=0)
    min_score: float = 1


# --- Ingestion Payloads ---


class DelegationResult(BaseModel):
    """Outcome of a sub-task delegated to a worker agent."""

    agent_type: str = Field(..., min_length=1)
    task: str
    result: str
    task_id: str | None = None
    workflow_id: str | None = None
    success: bool
    duration_ms: int | None = Field(default=None, ge=0)


class WorkflowSummary(BaseModel):
    """Summary of a multi-agent workflow."""

    description: str
    steps: list[str] = Field(default_factory=list)
    workflow_id: str = Field(..., min_length=1)
    status: WorkflowStatus
    agents: list[str] = Field(default_factory=list)


class CapabilityDescription(BaseModel):
    """What a worker agent can do."""

    agent_type: str = Field(..., min_length=1)
    capability: str = Field(..., min_length=1)
    description: str
    examples: list[str] = Field(default_factory=list)
    limitations: list[str] | None = None


# --- Statistics ---


class StoreStats(BaseModel):
    """Snapshot of the context store."""

    total: int = 0
    oldest: int | None = None
    newest: int | None = None
    by_category: dict[str, int] = Field(default_factory=dict)
    by_agent: dict[str, int] = Field(default_factory=dict)


class EngineStats(BaseModel):
    """Store and query cache statistics."""

    store: StoreStats
    cache: QueryCacheStats


# --- Correlation ---


class MatchSummary(BaseModel):
    """Reference to one entry returned by a retrieval."""

    id: str
    category: ContextCategory
    source: str
    agent_type: str | None = None
    timestamp: int
    relevance_score: float | None = None
    workflow_id: str | None = None
    task_id: str | None = None
    score: float


class RetrievalAggregate(BaseModel):
    """Aggregate figures for one retrieval."""

    retrieval_id: str
    count: int
    query_length: int
    mean_relevance: float
    cache_hit: bool = False


class CorrelationContext(BaseModel):
    """Caller-owned record the engine writes retrieval details into.

    The engine only ever writes to it; callers keep it for their own
    cross-referencing (session logs, delegation bookkeeping).
    """

    query: str | None = None
    retrieval_id: str | None = None
    timestamp: int | None = None
    matches: list[MatchSummary] = Field(default_factory=list)
    aggregate: RetrievalAggregate | None = None


# --- Broker Request/Response Schemas ---


class RetrieveRequest(BaseModel):
    """Request prior context for a free-text query."""

    query: str = ""
    include_correlation: bool = False


class RetrieveResponse(BaseModel):
    """Formatted context, ready for inclusion in a prompt."""

    context: str
    correlation: CorrelationContext | None = None


class IngestResponse(BaseModel):
    """Result of a best-effort ingestion."""

    entry_id: str | None = None
    accepted: bool


class CleanupRequest(BaseModel):
    """Age-based purge request."""

    max_age_ms: int = Field(default=DEFAULT_MAX_AGE_MS, ge=0)


class CleanupResponse(BaseModel):
    """Number of entries removed by a purge."""

    removed: int


class ErrorResponse(BaseModel):
    """Error response for failed requests."""

    detail: str
    error_code: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    broker: Literal["healthy", "unhealthy"] = "healthy"
    entries: int = 0
    cached_queries: int = 0
