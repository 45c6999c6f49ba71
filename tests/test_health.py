# tests/test_health.py
from fastapi.testclient import TestClient


def test_health_check(client: TestClient) -> None:
    """Ensure the health check endpoint reports service availability."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root_describes_service(client: TestClient) -> None:
    body = client.get("/").json()
    assert body["docs"] == "/docs"
    assert body["version"]
