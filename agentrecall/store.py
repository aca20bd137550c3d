"""Bounded in-memory context store with lexical relevance search."""

from __future__ import annotations

import logging
from typing import Callable, NamedTuple

from agentrecall.lru import BoundedLRU
from agentrecall.schemas import (
    DEFAULT_MAX_AGE_MS,
    ContextEntry,
    SearchOptions,
    StoreStats,
    current_time_ms,
)

logger = logging.getLogger(__name__)

DEFAULT_STORE_MAX_SIZE = 1000

MS_PER_DAY = 24 * 60 * 60 * 1000

# Score weights
CONTENT_MATCH_SCORE = 10
SOURCE_MATCH_SCORE = 2
CATEGORY_MATCH_SCORE = 2
AGENT_MATCH_SCORE = 2
TAG_MATCH_SCORE = 1
RECENCY_WINDOW_DAYS = 5


class ScoredEntry(NamedTuple):
    """A search hit with its runtime relevance score."""

    entry: ContextEntry
    score: float


def recency_bonus(timestamp: int, now_ms: int) -> float:
    """Linearly decaying bonus: 5 for a fresh entry, 0 from 5 days on."""
    age_days = max(0, now_ms - timestamp) / MS_PER_DAY
    return max(0.0, RECENCY_WINDOW_DAYS - age_days)


def score_entry(
    entry: ContextEntry,
    query_lower: str,
    options: SearchOptions,
    now_ms: int,
) -> float:
    """Compute the relevance score of one entry for a case-folded query.

    Args:
        entry: Stored context entry
        query_lower: Query, already lower-cased
        options: Bonus filters (category, agent type, tags)
        now_ms: Reference time for the recency bonus

    Returns:
        Sum of all matching terms
    """
    metadata = entry.metadata
    score = 0.0

    if query_lower in entry.content.lower():
        score += CONTENT_MATCH_SCORE
    if query_lower in entry.source.lower():
        score += SOURCE_MATCH_SCORE
    if options.type is not None and entry.category == options.type:
        score += CATEGORY_MATCH_SCORE
    if options.agent_type and metadata.agent_type == options.agent_type:
        score += AGENT_MATCH_SCORE
    # Flat bonus, not per matching tag
    if options.tags and any(tag in metadata.tags for tag in options.tags):
        score += TAG_MATCH_SCORE

    score += recency_bonus(metadata.timestamp, now_ms)

    if metadata.relevance_score is not None:
        score += metadata.relevance_score

    return score


class BoundedContextStore:
    """Context entries keyed by id, capped at ``max_size`` with LRU eviction."""

    def __init__(
        self,
        max_size: int = DEFAULT_STORE_MAX_SIZE,
        clock: Callable[[], int] | None = None,
    ):
        """Initialize the store.

        Args:
            max_size: Maximum number of entries before LRU eviction
            clock: Returns the current time in epoch ms (defaults to wall clock)
        """
        self.max_size = max_size
        self._clock = clock or current_time_ms
        self._entries: BoundedLRU[str, ContextEntry] = BoundedLRU(
            max_size,
            on_evict=self._on_evict,
        )

    def _on_evict(self, entry_id: str, entry: ContextEntry) -> None:
        logger.debug(
            f"Evicted context entry {entry_id} ({entry.category.value}) at capacity {self.max_size}"
        )

    def now_ms(self) -> int:
        """Current time according to the store's clock."""
        return self._clock()

    def add(self, entry: ContextEntry) -> None:
        """Insert an entry, replacing any entry with the same id."""
        self._entries.set(entry.id, entry)

    def get(self, entry_id: str) -> ContextEntry | None:
        """Look up one entry; counts as an access for eviction purposes."""
        return self._entries.get(entry_id)

    def get_all(self) -> list[ContextEntry]:
        """All held entries, least recently touched first."""
        return self._entries.values()

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> StoreStats:
        """Summarize the store.

        Returns:
            StoreStats with total count, timestamp bounds and per-category/agent counts
        """
        stats = StoreStats(total=len(self._entries))

        for entry in self._entries.values():
            timestamp = entry.metadata.timestamp
            category = entry.category.value
            stats.by_category[category] = stats.by_category.get(category, 0) + 1

            agent_type = entry.metadata.agent_type
            if agent_type:
                stats.by_agent[agent_type] = stats.by_agent.get(agent_type, 0) + 1

            if stats.oldest is None or timestamp < stats.oldest:
                stats.oldest = timestamp
            if stats.newest is None or timestamp > stats.newest:
                stats.newest = timestamp

        return stats

    def cleanup(self, max_age_ms: int = DEFAULT_MAX_AGE_MS) -> int:
        """Remove entries older than max_age_ms.

        Args:
            max_age_ms: Maximum entry age in milliseconds

        Returns:
            Number of entries removed
        """
        cutoff = self.now_ms() - max_age_ms
        stale_ids = [
            entry_id
            for entry_id, entry in self._entries.items()
            if entry.metadata.timestamp < cutoff
        ]

        for entry_id in stale_ids:
            self._entries.pop(entry_id)

        if stale_ids:
            logger.info(f"Purged {len(stale_ids)} context entries older than {max_age_ms}ms")
        return len(stale_ids)

    def search_scored(
        self,
        query: str,
        options: SearchOptions | None = None,
    ) -> list[ScoredEntry]:
        """Rank entries against a query.

        Linear scan over the store; does not affect eviction order.

        Args:
            query: Free-text query, compared case-insensitively
            options: Bonus filters, limit and minimum score

        Returns:
            Up to options.limit entries with score >= options.min_score,
            highest score first (ties keep store order)
        """
        options = options or SearchOptions()
        query_lower = query.lower()
        now = self.now_ms()

        results = []
        for entry in self._entries.values():
            score = score_entry(entry, query_lower, options, now)
            if score >= options.min_score:
                results.append(ScoredEntry(entry, score))

        results.sort(key=lambda item: item.score, reverse=True)
        return results[: options.limit]

    def search(
        self,
        query: str,
        options: SearchOptions | None = None,
    ) -> list[ContextEntry]:
        """Same as search_scored(), without the scores."""
        return [item.entry for item in self.search_scored(query, options)]
