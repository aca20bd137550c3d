"""Infer search bonus filters from the wording of a query."""

from __future__ import annotations

from agentrecall.capabilities import AGENT_TYPES
from agentrecall.schemas import ContextCategory, SearchOptions

# Checked in order; first match wins
CATEGORY_KEYWORDS: list[tuple[ContextCategory, tuple[str, ...]]] = [
    (ContextCategory.DELEGATION, ("delegation", "delegate")),
    (ContextCategory.WORKFLOW, ("workflow", "process")),
    (ContextCategory.AGENT_CAPABILITY, ("capability", "can do", "able to")),
    (ContextCategory.ERROR_RESOLUTION, ("error", "problem", "issue")),
]

# Every matching keyword group contributes its tag
TAG_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("success", ("success",)),
    ("failure", ("fail",)),
    ("fast", ("quick", "fast")),
    ("slow", ("slow", "long")),
]


def _detect_agent_type(query_lower: str) -> str | None:
    for agent_type in AGENT_TYPES:
        if agent_type in query_lower or agent_type.replace("_", " ") in query_lower:
            return agent_type
    return None


def _detect_category(query_lower: str) -> ContextCategory | None:
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in query_lower for keyword in keywords):
            return category
    return None


def _detect_tags(query_lower: str) -> list[str]:
    return [
        tag
        for tag, keywords in TAG_KEYWORDS
        if any(keyword in query_lower for keyword in keywords)
    ]


def infer_search_options(
    query: str,
    limit: int = 10,
    min_score: float = 1,
) -> SearchOptions:
    """Build SearchOptions whose bonus filters reflect the query text.

    The result depends only on the lower-cased query, so it is safe to use
    behind a cache keyed on the lower-cased query.

    Args:
        query: Free-text query
        limit: Maximum number of results
        min_score: Minimum combined score

    Returns:
        SearchOptions with agent type, category and tag bonuses filled in
    """
    query_lower = query.lower()
    return SearchOptions(
        type=_detect_category(query_lower),
        agent_type=_detect_agent_type(query_lower),
        tags=_detect_tags(query_lower),
        limit=limit,
        min_score=min_score,
    )
