"""Memoization of formatted retrieval results keyed by normalized query."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from agentrecall.lru import BoundedLRU

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_CACHE_SIZE = 200


@dataclass
class QueryCacheStats:
    """Query cache statistics."""

    hits: int = 0
    misses: int = 0
    size: int = 0
    max_size: int = 0


def make_key(query: str) -> str:
    """Derive the cache key for a query.

    Only case is folded; whitespace and punctuation stay significant.
    """
    return query.lower()


class QueryResultCache:
    """In-memory LRU cache of formatted retrieval strings, without TTL."""

    def __init__(self, max_size: int = DEFAULT_SEARCH_CACHE_SIZE):
        """Initialize the cache.

        Args:
            max_size: Maximum number of distinct queries before LRU eviction
        """
        self.max_size = max_size
        self._results: BoundedLRU[str, str] = BoundedLRU(max_size)
        self._stats = QueryCacheStats(max_size=max_size)

    def has(self, key: str) -> bool:
        return key in self._results

    def get(self, key: str) -> str | None:
        """Look up a cached result.

        Args:
            key: Key produced by make_key()

        Returns:
            Cached formatted string, or None if not found
        """
        value = self._results.get(key)
        if value is None:
            self._stats.misses += 1
        else:
            self._stats.hits += 1
        return value

    def set(self, key: str, value: str) -> None:
        self._results.set(key, value)

    def clear(self) -> None:
        """Drop every cached result."""
        dropped = len(self._results)
        self._results.clear()
        if dropped:
            logger.debug(f"Cleared {dropped} cached query results")

    def stats(self) -> QueryCacheStats:
        return QueryCacheStats(
            hits=self._stats.hits,
            misses=self._stats.misses,
            size=len(self._results),
            max_size=self.max_size,
        )

    def __len__(self) -> int:
        return len(self._results)
