"""
Health check tests for the API.
"""

from fastapi.testclient import TestClient


def test_health_check(client: TestClient):
    """Test that health endpoint returns ok status."""
    response = client.get("/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_readiness_check(client: TestClient):
    """Readiness reports the database and curriculum checks."""
    response = client.get("/v1/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["checks"]["db"]["status"] == "ok"
    assert data["checks"]["curriculum"]["status"] == "ok"
    assert data["request_id"]


def test_readiness_without_state(client: TestClient):
    state = client.app.state.learnsmart
    del client.app.state.learnsmart
    try:
        data = client.get("/v1/ready").json()
    finally:
        client.app.state.learnsmart = state
    assert data["status"] == "down"
    assert data["checks"]["curriculum"]["status"] == "down"


def test_root(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["version"] == "1.0.0"
