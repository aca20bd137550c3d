"""Pytest configuration and fixtures for AgentRecall tests."""

import pytest

from agentrecall.config import RetrieverConfig
from agentrecall.query_cache import QueryResultCache
from agentrecall.retriever import RetrievalEngine
from agentrecall.schemas import ContextCategory, ContextEntry, ContextMetadata
from agentrecall.store import MS_PER_DAY, BoundedContextStore

# 2025-01-27T00:00:00Z
BASE_TIME_MS = 1_737_936_000_000


class FakeClock:
    """Controllable epoch-ms clock."""

    def __init__(self, now: int = BASE_TIME_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms

    def days_ago(self, days: float) -> int:
        return int(self.now - days * MS_PER_DAY)


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at BASE_TIME_MS."""
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> BoundedContextStore:
    """Empty store driven by the fake clock."""
    return BoundedContextStore(max_size=1000, clock=clock)


@pytest.fixture
def engine(store: BoundedContextStore) -> RetrievalEngine:
    """Engine with default settings and no seeded capabilities."""
    config = RetrieverConfig()
    return RetrievalEngine(
        store=store,
        cache=QueryResultCache(max_size=config.search_cache_size),
        config=config,
    )


@pytest.fixture
def make_entry(clock: FakeClock):
    """Factory for context entries timestamped by the fake clock."""

    def _make(
        content: str = "generic context",
        source: str = "test",
        category: ContextCategory = ContextCategory.TASK_RESULT,
        entry_id: str | None = None,
        timestamp: int | None = None,
        **metadata,
    ) -> ContextEntry:
        fields = {
            "content": content,
            "source": source,
            "category": category,
            "metadata": ContextMetadata(
                timestamp=clock.now if timestamp is None else timestamp,
                **metadata,
            ),
        }
        if entry_id is not None:
            fields["id"] = entry_id
        return ContextEntry(**fields)

    return _make
