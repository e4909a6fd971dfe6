"""HTTP-level tests for the offline sync API."""

from __future__ import annotations

import time

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from fleetsync.core.config import Settings
from fleetsync.main import create_app

REPORT = {
    "driverName": "Sam Driver",
    "fleetNumber": "T-107",
    "category": "Engine",
    "severity": "HIGH",
    "description": "engine overheating",
}


class FlakyEndpoint:
    """Issues endpoint double that can be switched offline."""

    def __init__(self) -> None:
        self.online = True
        self.received: list[bytes] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if not self.online:
            raise httpx.ConnectError("Network is unreachable", request=request)
        if request.method == "GET":
            return httpx.Response(200, json={"status": "ok"})
        self.received.append(request.content)
        return httpx.Response(201, json={"ticket": 1000 + len(self.received)})


@pytest.fixture
def endpoint() -> FlakyEndpoint:
    return FlakyEndpoint()


@pytest.fixture
def client(tmp_path, endpoint):
    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        issues_endpoint_url="http://fleet.test/api/issues",
        metrics_enabled=False,
    )
    http_client = httpx.Client(transport=httpx.MockTransport(endpoint))
    app = create_app(settings, http_client=http_client)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_offline_report_synced_after_reconnect(client, endpoint):
    endpoint.online = False

    queued = client.post("/api/reports", json=REPORT)
    assert queued.status_code == 202
    assert queued.json()["status"] == "queued"
    assert client.get("/api/offline/queue/length").json() == {"queue_length": 1}

    endpoint.online = True
    before = int(time.time() * 1000)
    delivered = client.post("/api/offline/events", json={"type": "SYNC_ISSUES"})
    after = int(time.time() * 1000)

    assert delivered.json() == {"delivered": True}
    status = client.get("/api/offline/status").json()
    assert status["queue_length"] == 0
    assert before <= status["last_sync_time"] <= after
    assert status["draining"] is False
    assert len(endpoint.received) == 1
    notes = client.get("/api/notifications").json()
    assert notes[0]["message"] == "1 offline report submitted successfully!"


def test_online_report_is_submitted_directly(client, endpoint):
    response = client.post("/api/reports", json=REPORT)

    assert response.status_code == 201
    assert response.json() == {"status": "submitted", "ticket": 1001, "queue_id": None}
    assert client.get("/api/offline/queue/length").json() == {"queue_length": 0}


def test_invalid_report_is_rejected(client):
    response = client.post("/api/reports", json={**REPORT, "description": "short"})

    assert response.status_code == 422


def test_queue_endpoints(client):
    created = client.post("/api/offline/queue", json=REPORT)
    assert created.status_code == 201
    record_id = created.json()["id"]
    assert record_id.startswith("offline_")

    [pending] = client.get("/api/offline/queue").json()
    assert pending["id"] == record_id
    assert pending["retry_count"] == 0
    assert pending["payload"]["fleetNumber"] == "T-107"

    assert client.delete(f"/api/offline/queue/{record_id}").status_code == 204
    assert client.delete(f"/api/offline/queue/{record_id}").status_code == 404
    assert client.get("/api/offline/queue").json() == []


def test_clear_queue(client):
    client.post("/api/offline/queue", json=REPORT)
    client.post("/api/offline/queue", json=REPORT)

    assert client.delete("/api/offline/queue").status_code == 204
    assert client.get("/api/offline/queue/length").json() == {"queue_length": 0}


def test_manual_sync_reports_counts(client, endpoint):
    endpoint.online = False
    client.post("/api/offline/queue", json=REPORT)

    first = client.post("/api/offline/sync").json()
    assert first["retried"] == 1
    assert first["queue_length"] == 1

    endpoint.online = True
    second = client.post("/api/offline/sync").json()
    assert second["succeeded"] == 1
    assert second["permanently_failed"] == 0
    assert second["queue_length"] == 0
    assert second["last_sync_time"] is not None


def test_duplicate_worker_event_is_ignored(client):
    first = client.post("/api/offline/events", json={"type": "SYNC_ISSUES", "id": "sync-1"})
    second = client.post("/api/offline/events", json={"type": "SYNC_ISSUES", "id": "sync-1"})

    assert first.json() == {"delivered": True}
    assert second.json() == {"delivered": False}


def test_update_available_event(client):
    client.post("/api/offline/events", json={"type": "UPDATE_AVAILABLE"})

    notes = client.get("/api/notifications").json()
    assert notes[0]["message"] == "App update available!"


def test_unknown_event_type_rejected(client):
    assert client.post("/api/offline/events", json={"type": "REBOOT"}).status_code == 422


def test_storage_failure_maps_to_503(client):
    SQLModel.metadata.drop_all(client.app.state.offline.store.engine)

    response = client.get("/api/offline/queue/length")

    assert response.status_code == 503
    assert response.json() == {"detail": "offline_store_unavailable"}


def test_metrics_and_logs_exposed(client):
    assert client.get("/api/metrics").status_code == 200
    assert isinstance(client.get("/api/logs").json(), list)
    assert client.get("/api/logs", params={"level": "ERROR"}).status_code == 200
    assert client.get("/api/logs", params={"level": "LOUD"}).status_code == 422
