"""Tests for HTTP broker contract compliance."""

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from agentrecall.broker import create_app
from agentrecall.retriever import NO_QUERY_MESSAGE, create_engine
from agentrecall.store import MS_PER_DAY


@pytest.fixture
def engine(clock):
    """Unseeded engine on the fake clock."""
    return create_engine(seed_capabilities=False, clock=clock)


@pytest.fixture
def client(engine):
    return TestClient(create_app(engine))


class TestIngestionEndpoints:
    """Test /context/* endpoints."""

    def test_record_delegation(self, client, engine):
        """Verify /context/delegation accepts a valid delegation."""
        request = {
            "agent_type": "git",
            "task": "Check status",
            "result": "clean working tree",
            "task_id": "task-001",
            "success": True,
        }

        response = client.post("/context/delegation", json=request)

        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is True
        assert engine.store.get(data["entry_id"]).metadata.task_id == "task-001"

    def test_record_delegation_duration_tag(self, client, engine):
        response = client.post("/context/delegation", json={
            "agent_type": "coding",
            "task": "Run tests",
            "result": "ok",
            "success": True,
            "duration_ms": 3000,
        })

        entry = engine.store.get(response.json()["entry_id"])
        assert "duration-3s" in entry.metadata.tags

    def test_record_workflow(self, client):
        request = {
            "description": "Release pipeline",
            "workflow_id": "wf-1",
            "status": "completed",
            "steps": ["build", "test"],
            "agents": ["coding"],
        }

        response = client.post("/context/workflow", json=request)

        assert response.status_code == 200
        assert response.json()["accepted"] is True

    def test_record_capability(self, client):
        request = {
            "agent_type": "browser",
            "capability": "Web Operations",
            "description": "Searches the web",
            "examples": ["web search"],
        }

        response = client.post("/context/capability", json=request)

        assert response.status_code == 200
        assert response.json()["entry_id"].startswith("ctx-")

    def test_invalid_status_returns_422(self, client):
        """Unknown workflow status should be rejected."""
        request = {
            "description": "x",
            "workflow_id": "wf-2",
            "status": "paused",
        }

        response = client.post("/context/workflow", json=request)
        assert response.status_code == 422

    def test_missing_required_fields_returns_422(self, client):
        """Missing required fields should fail validation."""
        response = client.post("/context/delegation", json={"agent_type": "git"})
        assert response.status_code == 422

    def test_ingestion_failure_not_accepted(self, client, engine):
        """Engine-side failures come back as accepted=false."""
        with patch.object(engine.store, "add", side_effect=RuntimeError("boom")):
            response = client.post("/context/delegation", json={
                "agent_type": "git",
                "task": "t",
                "result": "r",
                "success": False,
            })

        assert response.status_code == 200
        assert response.json() == {"entry_id": None, "accepted": False}


class TestRetrieveEndpoint:
    """Test /retrieve."""

    def test_retrieve_returns_context(self, client):
        client.post("/context/delegation", json={
            "agent_type": "coding",
            "task": "Run unit tests",
            "result": "42 passed",
            "success": True,
        })

        response = client.post("/retrieve", json={"query": "unit tests"})

        assert response.status_code == 200
        data = response.json()
        assert "Run unit tests" in data["context"]
        assert data["correlation"] is None

    def test_retrieve_with_correlation(self, client):
        client.post("/context/delegation", json={
            "agent_type": "coding",
            "task": "Run unit tests",
            "result": "42 passed",
            "success": True,
        })

        response = client.post("/retrieve", json={"query": "unit tests", "include_correlation": True})

        correlation = response.json()["correlation"]
        assert correlation["query"] == "unit tests"
        assert correlation["aggregate"]["count"] == 1
        assert correlation["matches"][0]["agent_type"] == "coding"

    def test_empty_query(self, client):
        response = client.post("/retrieve", json={})

        assert response.status_code == 200
        assert response.json()["context"] == NO_QUERY_MESSAGE


class TestHousekeepingEndpoints:
    """Test /stats, /cleanup and /health."""

    def test_stats(self, client):
        client.post("/context/capability", json={
            "agent_type": "git",
            "capability": "Version Control",
            "description": "Git",
        })

        response = client.get("/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["store"]["total"] == 1
        assert data["store"]["by_agent"] == {"git": 1}
        assert data["cache"]["max_size"] == 200

    def test_cleanup(self, client, clock):
        client.post("/context/capability", json={
            "agent_type": "git",
            "capability": "Version Control",
            "description": "Git",
        })
        clock.advance(8 * MS_PER_DAY)

        response = client.post("/cleanup", json={})

        assert response.status_code == 200
        assert response.json()["removed"] == 1

    def test_cleanup_rejects_negative_age(self, client):
        response = client.post("/cleanup", json={"max_age_ms": -1})
        assert response.status_code == 422

    def test_health_endpoint_returns_status(self, client):
        """Health endpoint returns broker status."""
        client.post("/retrieve", json={"query": "anything"})

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["broker"] == "healthy"
        assert data["entries"] == 0
        assert data["cached_queries"] == 1


class TestCreateApp:
    """Test app construction."""

    def test_default_app_seeds_capabilities(self, monkeypatch):
        monkeypatch.setenv("AGENTRECALL_STORE_MAX_SIZE", "50")

        app = create_app()

        assert app.state.engine.store.max_size == 50
        assert len(app.state.engine.store) == 7

    def test_apps_do_not_share_engines(self):
        first = create_app()
        second = create_app()
        assert first.state.engine is not second.state.engine
