"""Health check and public contact form."""

import pytest

from unshared_api import __version__


def test_health_up(client, monkeypatch):
    monkeypatch.setenv("BREVO_API_KEY", "xkeysib-test")

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "version": __version__,
        "services": {"store": "up", "email": "configured"},
    }


def test_health_degraded_when_store_down(client, store, monkeypatch):
    monkeypatch.delenv("BREVO_API_KEY", raising=False)
    store.fail.add("health.ping")

    response = client.get("/health")

    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "degraded"
    assert body["services"]["store"].startswith("down: ")
    assert body["services"]["email"] == "not configured"


def test_health_needs_no_auth(client):
    assert "X-Request-ID" in client.get("/health").headers


def test_contact_acknowledged(client):
    response = client.post(
        "/api/contact",
        json={"name": "Sam", "email": "sam@prospect.test", "message": "Tell me more"},
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Message received successfully"}


@pytest.mark.parametrize(
    "payload",
    [{}, {"name": "Sam", "email": "sam@prospect.test"}, {"name": "", "email": "a", "message": "b"}],
)
def test_contact_requires_fields(client, payload):
    response = client.post("/api/contact", json=payload)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Missing required fields"}
