"""Shared fixtures: a fresh on-disk store per test and a fake clock."""

from __future__ import annotations

import pytest

from fleetsync.services.last_sync import LastSyncTracker
from fleetsync.services.offline_queue import OfflineQueue
from fleetsync.services.offline_store import OfflineStore
from fleetsync.services.sync_engine import SyncEngine
from tests.helpers import FakeClock


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'device' / 'offline.db'}"


@pytest.fixture
def store(db_url):
    offline_store = OfflineStore.from_url(db_url)
    yield offline_store
    offline_store.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def queue(store, clock) -> OfflineQueue:
    return OfflineQueue(store, clock=clock)


@pytest.fixture
def last_sync(store) -> LastSyncTracker:
    return LastSyncTracker(store.engine)


@pytest.fixture
def make_engine(queue, last_sync, clock):
    def _make(submit, **kwargs) -> SyncEngine:
        return SyncEngine(queue, submit, last_sync, clock=clock, **kwargs)

    return _make
