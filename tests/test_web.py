"""Tests for the status blueprint: health, worker status, enqueue."""

from unittest.mock import MagicMock

import pytest

from conftest import NOW
from notifier.web import create_app


@pytest.fixture
def worker_stub():
    worker = MagicMock()
    worker.get_status.return_value = {"state": "running", "running": True, "jobs": [], "recent_history": []}
    return worker


@pytest.fixture
def client(tmp_db, worker_stub):
    app = create_app(tmp_db, worker_stub)
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "database": True}


def test_worker_status_includes_backlog(client, tmp_db):
    tmp_db.notifications.create("u1", "system", "t", "m", scheduled_for=None)
    tmp_db.notifications.create("u1", "system", "t", "m", scheduled_for=NOW)
    resp = client.get("/api/worker/status")
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["state"] == "running"
    assert data["pending_notifications"] == 1


def test_worker_status_without_worker(tmp_db):
    app = create_app(tmp_db)
    with app.test_client() as c:
        data = c.get("/api/worker/status").get_json()
    assert data["state"] == "detached"


def test_enqueue_notification(client, tmp_db):
    resp = client.post(
        "/api/notifications",
        json={
            "user_id": "u7",
            "notification_type": "partner_match",
            "title": "New study partner",
            "message": "You matched with Sam",
            "metadata": {"partner_id": "u8"},
            "scheduled_for": "2025-03-10T12:30:00Z",
        },
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    nid = body["notification"]["notification_id"]

    stored = tmp_db.notifications.get(nid)
    assert stored.user_id == "u7"
    assert stored.scheduled_for.isoformat() == "2025-03-10T12:30:00"
    assert stored.parsed_metadata() == {"partner_id": "u8"}


def test_enqueue_rejects_unknown_type(client):
    resp = client.post(
        "/api/notifications",
        json={"user_id": "u1", "notification_type": "carrier_pigeon", "title": "t", "message": "m"},
    )
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["error"] == "Validation failed"
    assert data["details"][0]["field"] == "notification_type"


def test_enqueue_requires_body(client):
    resp = client.post("/api/notifications", data="", content_type="application/json")
    assert resp.status_code == 400


def test_unknown_route_returns_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["status"] == 404


def test_method_not_allowed(client):
    resp = client.get("/api/notifications")
    assert resp.status_code == 405
