"""Supervisor context retrieval engine."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from agentrecall.capabilities import iter_default_capabilities
from agentrecall.config import RetrieverConfig
from agentrecall.ingest import (
    build_capability_entry,
    build_delegation_entry,
    build_workflow_entry,
)
from agentrecall.query_analysis import infer_search_options
from agentrecall.query_cache import QueryResultCache, make_key
from agentrecall.schemas import (
    DEFAULT_MAX_AGE_MS,
    CapabilityDescription,
    ContextEntry,
    CorrelationContext,
    DelegationResult,
    EngineStats,
    MatchSummary,
    RetrievalAggregate,
    SearchOptions,
    WorkflowSummary,
)
from agentrecall.store import MS_PER_DAY, BoundedContextStore, ScoredEntry

logger = logging.getLogger(__name__)

NO_QUERY_MESSAGE = "No query provided."
NO_CONTEXT_MESSAGE = 'No relevant context found for "{query}".'
RETRIEVAL_ERROR_MESSAGE = "Retrieval error: proceeding without prior context."

BLOCK_SEPARATOR = "\n\n---\n\n"

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_MINUTE = 60 * 1000


@dataclass
class RetrievalResult:
    """Outcome of an internal retrieval: a formatted string or the fault."""

    value: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def format_age(timestamp: int, now_ms: int) -> str:
    """Human-readable age: "3d ago", "5h ago", "12m ago" or "recent"."""
    age_ms = max(0, now_ms - timestamp)
    if age_ms >= MS_PER_DAY:
        return f"{age_ms // MS_PER_DAY}d ago"
    if age_ms >= MS_PER_HOUR:
        return f"{age_ms // MS_PER_HOUR}h ago"
    if age_ms >= MS_PER_MINUTE:
        return f"{age_ms // MS_PER_MINUTE}m ago"
    return "recent"


def format_results(results: list[ScoredEntry], now_ms: int) -> str:
    """Format ranked entries into one prompt-ready block of text.

    Args:
        results: Ranked search hits
        now_ms: Reference time for age annotations

    Returns:
        Ordinal-labeled blocks joined by a visible separator
    """
    total = len(results)
    blocks = []

    for position, item in enumerate(results, 1):
        entry = item.entry
        header = [f"[{position}/{total}] {entry.category.value.upper()}"]
        if entry.metadata.relevance_score is not None:
            header.append(f"relevance {entry.metadata.relevance_score:g}")
        header.append(format_age(entry.metadata.timestamp, now_ms))

        blocks.append(
            "\n".join([
                " | ".join(header),
                f"Source: {entry.source}",
                entry.content,
            ])
        )

    return BLOCK_SEPARATOR.join(blocks)


def _summarize_match(item: ScoredEntry) -> MatchSummary:
    entry = item.entry
    return MatchSummary(
        id=entry.id,
        category=entry.category,
        source=entry.source,
        agent_type=entry.metadata.agent_type,
        timestamp=entry.metadata.timestamp,
        relevance_score=entry.metadata.relevance_score,
        workflow_id=entry.metadata.workflow_id,
        task_id=entry.metadata.task_id,
        score=item.score,
    )


def _normalize_query(query: str | Sequence[str]) -> str:
    """Accept a plain string or a sequence of message strings."""
    if isinstance(query, (list, tuple)):
        query = " ".join(str(part) for part in query)
    if not query.strip():
        return ""
    return query


class RetrievalEngine:
    """Short-term recall for a supervisor agent.

    Holds one context store and one query cache for the lifetime of a
    coordination session. ``retrieve`` and the ``add_*_context`` helpers
    never raise: retrieval degrades to a fixed advisory string and failed
    ingestions are logged and dropped.
    """

    def __init__(
        self,
        store: BoundedContextStore | None = None,
        cache: QueryResultCache | None = None,
        config: RetrieverConfig | None = None,
    ):
        """Initialize the engine.

        Args:
            store: Context store (built from config when omitted)
            cache: Query result cache (built from config when omitted)
            config: Retrieval settings
        """
        self.config = config or RetrieverConfig()
        self.store = store if store is not None else BoundedContextStore(max_size=self.config.store_max_size)
        self.cache = cache if cache is not None else QueryResultCache(max_size=self.config.search_cache_size)

        logger.info(
            f"Retrieval engine initialized: max_results={self.config.max_results}, "
            f"min_score={self.config.default_min_score}, store_max_size={self.store.max_size}, "
            f"search_cache_size={self.cache.max_size}"
        )

    # --- Retrieval ---

    async def retrieve(
        self,
        query: str | Sequence[str] | None,
        correlation: CorrelationContext | None = None,
    ) -> str:
        """Retrieve prior context relevant to a query.

        Args:
            query: Free-text query (or a sequence of message strings)
            correlation: Optional caller-owned record to write retrieval details into

        Returns:
            Formatted context, or one of the fixed sentinel messages
        """
        if not query:
            return NO_QUERY_MESSAGE

        result = self._retrieve(query, correlation)
        if not result.ok:
            logger.error(f"Context retrieval failed: {result.error}", exc_info=result.error)
            return RETRIEVAL_ERROR_MESSAGE
        return result.value

    def _retrieve(
        self,
        query: str | Sequence[str],
        correlation: CorrelationContext | None,
    ) -> RetrievalResult:
        retrieval_id = f"ret-{uuid.uuid4().hex[:12]}"
        started = time.perf_counter()

        try:
            text = _normalize_query(query)
            if not text:
                return RetrievalResult(value=NO_QUERY_MESSAGE)

            key = make_key(text)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Retrieval {retrieval_id}: cache hit")
                if correlation is not None:
                    self._record_correlation(correlation, retrieval_id, text, [], cache_hit=True)
                return RetrievalResult(value=cached)

            results = self.store.search_scored(text, self._search_options(text))

            if results:
                formatted = format_results(results, self.store.now_ms())
            else:
                formatted = NO_CONTEXT_MESSAGE.format(query=text)
            self.cache.set(key, formatted)

            if correlation is not None:
                self._record_correlation(correlation, retrieval_id, text, results)

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"Retrieval {retrieval_id} completed: {len(results)} matches, "
                f"{len(formatted)} chars in {elapsed_ms:.1f}ms"
            )
            return RetrievalResult(value=formatted)
        except Exception as e:
            return RetrievalResult(error=e)

    def _search_options(self, query: str) -> SearchOptions:
        if self.config.infer_filters:
            return infer_search_options(
                query,
                limit=self.config.max_results,
                min_score=self.config.default_min_score,
            )
        return SearchOptions(
            limit=self.config.max_results,
            min_score=self.config.default_min_score,
        )

    def _record_correlation(
        self,
        correlation: CorrelationContext,
        retrieval_id: str,
        query: str,
        results: list[ScoredEntry],
        cache_hit: bool = False,
    ) -> None:
        scores = [item.score for item in results]
        correlation.query = query
        correlation.retrieval_id = retrieval_id
        correlation.timestamp = self.store.now_ms()
        correlation.matches = [_summarize_match(item) for item in results]
        correlation.aggregate = RetrievalAggregate(
            retrieval_id=retrieval_id,
            count=len(results),
            query_length=len(query),
            mean_relevance=sum(scores) / len(scores) if scores else 0.0,
            cache_hit=cache_hit,
        )

    # --- Ingestion ---

    def add(self, entry: ContextEntry) -> None:
        """Store a prepared entry; cached query results are dropped."""
        self.store.add(entry)
        self.cache.clear()

    def _ingest(
        self,
        label: str,
        schema: type,
        build: Callable[[Any, int], ContextEntry],
        payload: Any,
        fields: dict[str, Any],
    ) -> str | None:
        try:
            model = schema.model_validate(payload if payload is not None else fields)
            entry = build(model, self.store.now_ms())
            self.add(entry)
        except Exception as e:
            logger.warning(f"Failed to add {label} context: {e}")
            return None

        logger.debug(f"Added {label} context {entry.id} from {entry.source}")
        return entry.id

    def add_delegation_context(
        self,
        payload: DelegationResult | dict[str, Any] | None = None,
        **fields: Any,
    ) -> str | None:
        """Record the outcome of a delegated sub-task.

        Accepts a DelegationResult, a dict, or the same fields as keywords.

        Returns:
            New entry id, or None if the payload could not be ingested
        """
        return self._ingest("delegation", DelegationResult, build_delegation_entry, payload, fields)

    def add_workflow_context(
        self,
        payload: WorkflowSummary | dict[str, Any] | None = None,
        **fields: Any,
    ) -> str | None:
        """Record a multi-agent workflow summary."""
        return self._ingest("workflow", WorkflowSummary, build_workflow_entry, payload, fields)

    def add_capability_context(
        self,
        payload: CapabilityDescription | dict[str, Any] | None = None,
        **fields: Any,
    ) -> str | None:
        """Record what a worker agent can do."""
        return self._ingest(
            "capability", CapabilityDescription, build_capability_entry, payload, fields
        )

    # --- Housekeeping ---

    def get_stats(self) -> EngineStats:
        return EngineStats(store=self.store.get_stats(), cache=self.cache.stats())

    def cleanup(self, max_age_ms: int = DEFAULT_MAX_AGE_MS) -> int:
        """Purge entries older than max_age_ms.

        Returns:
            Number of entries removed (0 if the purge failed)
        """
        try:
            removed = self.store.cleanup(max_age_ms)
        except Exception as e:
            logger.warning(f"Context cleanup failed: {e}")
            return 0

        if removed:
            self.cache.clear()
        logger.info(f"Cleanup removed {removed} context entries")
        return removed


def create_engine(
    config: RetrieverConfig | None = None,
    seed_capabilities: bool = True,
    clock: Callable[[], int] | None = None,
) -> RetrievalEngine:
    """Build an engine for one coordination session.

    Args:
        config: Retrieval settings (defaults when omitted)
        seed_capabilities: Pre-populate the default worker capabilities
        clock: Epoch-ms clock for the store (wall clock when omitted)

    Returns:
        RetrievalEngine owning a fresh store and cache
    """
    config = config or RetrieverConfig()
    engine = RetrievalEngine(
        store=BoundedContextStore(max_size=config.store_max_size, clock=clock),
        cache=QueryResultCache(max_size=config.search_cache_size),
        config=config,
    )

    if seed_capabilities:
        for capability in iter_default_capabilities():
            engine.add_capability_context(capability)
        logger.info(f"Seeded {len(engine.store)} default capabilities")

    return engine
