"""Tests for the reconnect monitor worker entry point."""

from __future__ import annotations

import httpx

from fleetsync.core.config import Settings
from fleetsync.services.context import build_context
from fleetsync.services.offline_queue import OfflineQueue
from fleetsync.services.offline_store import OfflineStore
from fleetsync.worker import reconnect_monitor


def test_oneshot_drains_existing_queue(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path / 'worker.db'}"
    store = OfflineStore.from_url(db_url)
    OfflineQueue(store).enqueue({"fleetNumber": "T-107"})
    store.close()

    received = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(request.content)
        return httpx.Response(201, json={"ticket": 1})

    settings = Settings(database_url=db_url, metrics_enabled=False)
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(reconnect_monitor, "settings", settings)
    monkeypatch.setattr(reconnect_monitor, "build_context", lambda cfg: build_context(cfg, http_client=http_client))
    monkeypatch.setattr("sys.argv", ["reconnect_monitor", "--oneshot"])

    assert reconnect_monitor.main() == 0

    assert len(received) == 1
    reopened = OfflineStore.from_url(db_url)
    try:
        assert reopened.count() == 0
    finally:
        reopened.close()
