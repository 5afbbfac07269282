"""Smoke tests for the unauthenticated endpoints."""

from fastapi.testclient import TestClient


def test_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "service": "quiz-attempt-engine"}


def test_root(client: TestClient):
    data = client.get("/").json()
    assert data["name"] == "Quiz Attempt Engine API"
    assert data["docs"] == "/docs"
