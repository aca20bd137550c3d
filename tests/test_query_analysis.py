"""Tests for query-based filter inference."""

from agentrecall.query_analysis import infer_search_options
from agentrecall.schemas import ContextCategory


class TestInferSearchOptions:
    """Test bonus filter detection."""

    def test_detects_agent_type(self):
        assert infer_search_options("last git commit").agent_type == "git"

    def test_detects_spaced_agent_type(self):
        assert infer_search_options("check System Info output").agent_type == "system_info"

    def test_detects_category(self):
        assert infer_search_options("who did I delegate to").type == ContextCategory.DELEGATION
        assert infer_search_options("release workflow").type == ContextCategory.WORKFLOW
        assert infer_search_options("what can do math").type == ContextCategory.AGENT_CAPABILITY
        assert infer_search_options("disk problem").type == ContextCategory.ERROR_RESOLUTION

    def test_first_category_wins(self):
        """Delegation keywords take precedence over error keywords."""
        assert infer_search_options("delegation error").type == ContextCategory.DELEGATION

    def test_detects_tags(self):
        options = infer_search_options("failed slow deploy")
        assert options.tags == ["failure", "slow"]

    def test_plain_query_has_no_filters(self):
        options = infer_search_options("weather tomorrow")
        assert options.type is None
        assert options.agent_type is None
        assert options.tags == []

    def test_passes_bounds_through(self):
        options = infer_search_options("anything", limit=3, min_score=7)
        assert options.limit == 3
        assert options.min_score == 7

    def test_case_insensitive(self):
        assert infer_search_options("GIT Workflow") == infer_search_options("git workflow")
