"""Integration tests for the API endpoints."""

import time
import uuid

import pytest
from fastapi.testclient import TestClient

from knowledge_search.main import app


class TestAPI:
    """Integration tests for API endpoints."""

    @pytest.fixture
    def client(self):
        """Create a test client with the sample documents loaded."""
        with TestClient(app) as client:
            yield client

    @pytest.fixture
    def identity(self):
        """A fresh identity so history does not leak between tests."""
        return f"user-{uuid.uuid4().hex}"

    def test_root_endpoint(self, client):
        """Test the root endpoint."""
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["name"] == "Knowledge Search"
        assert data["version"] == "1.0.0"
        assert data["status"] == "running"

    def test_api_info_endpoint(self, client):
        """Test the API info endpoint."""
        response = client.get("/api")
        assert response.status_code == 200

        data = response.json()
        assert "endpoints" in data
        assert "features" in data
        assert data["configuration"]["result_cap"] == 8

    def test_search(self, client):
        """Test one-shot search."""
        response = client.get("/api/v1/search/billing")
        assert response.status_code == 200

        data = response.json()
        assert data["index_ready"] is True
        assert data["results"][0]["document_id"] == "doc-billing-faq"
        assert "title" in data["results"][0]["matched_fields"]
        assert data["total_results"] <= 8

    def test_search_with_typo(self, client):
        """Test that a misspelled word still finds its document."""
        response = client.get("/api/v1/search/pasword")
        assert response.status_code == 200

        data = response.json()
        assert data["results"][0]["document_id"] == "doc-password-reset"
        assert data["results"][0]["match_types"]["title"] == "fuzzy"

    def test_search_no_match(self, client):
        """Test a query without results."""
        response = client.get("/api/v1/search/qqqzzzx")
        assert response.status_code == 200

        data = response.json()
        assert data["total_results"] == 0
        assert data["results"] == []
        assert isinstance(data["suggestions"], list)

    def test_search_max_results(self, client):
        """Test lowering the number of results."""
        response = client.get("/api/v1/search/security?max_results=1")
        assert response.status_code == 200
        assert response.json()["total_results"] == 1

    def test_search_by_category(self, client):
        """Test restricting a search to one category."""
        unfiltered = client.get("/api/v1/search/security").json()
        assert "doc-api-keys" in [r["document_id"] for r in unfiltered["results"]]

        response = client.get("/api/v1/search/security?category=account")
        assert response.status_code == 200

        data = response.json()
        ids = [r["document_id"] for r in data["results"]]
        assert data["category"] == "account"
        assert {"doc-password-reset", "doc-two-factor"} <= set(ids)
        assert "doc-api-keys" not in ids

    def test_search_by_category_with_body(self, client):
        """Test the category filter in a request body."""
        response = client.post(
            "/api/v1/search", json={"query": "security", "category": "Developers"}
        )
        assert response.status_code == 200

        ids = [r["document_id"] for r in response.json()["results"]]
        assert ids[0] == "doc-api-keys"
        assert "doc-password-reset" not in ids

    def test_search_query_too_long(self, client):
        """Test that overly long queries are rejected."""
        response = client.get(f"/api/v1/search/{'a' * 101}")
        assert response.status_code == 422

    def test_search_with_body(self, client):
        """Test search with a request body."""
        response = client.post("/api/v1/search", json={"query": "slack notifications"})
        assert response.status_code == 200

        data = response.json()
        assert data["results"][0]["document_id"] == "doc-slack-integration"

    def test_search_with_blank_body(self, client):
        """Test that blank queries are rejected by validation."""
        response = client.post("/api/v1/search", json={"query": "   "})
        assert response.status_code == 422

    def test_suggestions(self, client):
        """Test vocabulary suggestions."""
        response = client.get("/api/v1/suggestions/biling")
        assert response.status_code == 200
        assert "billing" in response.json()

    def test_document_stats(self, client):
        """Test index statistics."""
        response = client.get("/api/v1/documents/stats")
        assert response.status_code == 200

        data = response.json()
        assert data["total_documents"] == 12
        assert data["version"] >= 1
        assert {"name": "security", "count": 3} in data["popular_tags"]
        assert len(data["popular_categories"]) <= 8

    def test_publish_documents(self, client):
        """Test replacing the document snapshot."""
        response = client.put("/api/v1/documents", json={"documents": [
            {"id": "new-1", "title": "Kubernetes Deployments", "tags": ["k8s"]},
        ]})
        assert response.status_code == 200
        assert response.json()["total_documents"] == 1

        data = client.get("/api/v1/search/kubernetes").json()
        assert [r["document_id"] for r in data["results"]] == ["new-1"]
        assert client.get("/api/v1/search/billing").json()["total_results"] == 0

    def test_session_submit_and_history(self, client, identity):
        """Test a session from opening to selection."""
        response = client.post("/api/v1/sessions", json={"identity": identity})
        assert response.status_code == 201

        session = response.json()
        session_id = session["session_id"]
        assert session["state"]["status"] == "idle"
        assert session["state"]["index_ready"] is True

        response = client.post(f"/api/v1/sessions/{session_id}/submit", json={"text": "webhooks"})
        assert response.status_code == 200

        state = response.json()["state"]
        assert state["status"] == "results_ready"
        assert state["results"][0]["document_id"] == "doc-webhooks"
        assert state["recent"][0]["query_text"] == "webhooks"

        response = client.post(f"/api/v1/sessions/{session_id}/select", json={"document_id": "doc-webhooks"})
        assert response.status_code == 200
        assert response.json()["selected"]["document_id"] == "doc-webhooks"
        assert response.json()["state"]["status"] == "idle"

        history = client.get(f"/api/v1/history/{identity}").json()
        assert [r["query_text"] for r in history["recent"]] == ["webhooks"]

        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 204

    def test_session_query_change(self, client, identity):
        """Test debounced evaluation of typed text."""
        session_id = client.post("/api/v1/sessions", json={"identity": identity}).json()["session_id"]

        response = client.post(f"/api/v1/sessions/{session_id}/query", json={"text": "export"})
        assert response.status_code == 200
        assert response.json()["state"]["status"] == "debouncing"

        state = None
        deadline = time.time() + 5
        while time.time() < deadline:
            state = client.get(f"/api/v1/sessions/{session_id}").json()["state"]
            if state["status"] in ("results_ready", "empty"):
                break
            time.sleep(0.05)

        assert state["status"] == "results_ready"
        assert state["results"][0]["document_id"] == "doc-export-data"

        # Typing never records history
        assert client.get(f"/api/v1/history/{identity}").json()["recent"] == []

    def test_session_blank_submit(self, client, identity):
        """Test that a blank submission is immediately empty."""
        session_id = client.post("/api/v1/sessions", json={"identity": identity}).json()["session_id"]

        response = client.post(f"/api/v1/sessions/{session_id}/submit", json={"text": "  "})

        assert response.json()["state"]["status"] == "empty"
        assert client.get(f"/api/v1/history/{identity}").json()["recent"] == []

    def test_unknown_session(self, client):
        """Test requests for a session that does not exist."""
        assert client.get("/api/v1/sessions/missing").status_code == 404
        assert client.post("/api/v1/sessions/missing/query", json={"text": "a"}).status_code == 404
        assert client.delete("/api/v1/sessions/missing").status_code == 404

    def test_clear_history(self, client, identity):
        """Test clearing recent queries."""
        session_id = client.post("/api/v1/sessions", json={"identity": identity}).json()["session_id"]
        client.post(f"/api/v1/sessions/{session_id}/submit", json={"text": "slack"})

        assert client.delete(f"/api/v1/history/{identity}").status_code == 204
        assert client.get(f"/api/v1/history/{identity}").json()["recent"] == []

    def test_health_check(self, client):
        """Test health check endpoint."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert "uptime" in data
        assert "dependencies" in data

    def test_readiness_check(self, client):
        """Test readiness check endpoint."""
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_liveness_check(self, client):
        """Test liveness check endpoint."""
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_metrics(self, client):
        """Test metrics endpoint."""
        client.get("/api/v1/search/billing")

        response = client.get("/api/v1/metrics")
        assert response.status_code == 200

        data = response.json()
        assert data["total_queries"] >= 1
        assert data["indexed_documents"] == 12
        assert data["memory_usage_mb"] > 0
        assert "active_sessions" in data
