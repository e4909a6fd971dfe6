"""Tests for the durable offline store."""

from __future__ import annotations

import pytest
from sqlmodel import Session, SQLModel

from fleetsync.core.errors import QueueCorruption, StorageError
from fleetsync.models import OfflineIssueRecord
from fleetsync.services.offline_store import OfflineStore, QueuedSubmission


def _record(record_id: str = "offline_1_abc", **overrides) -> QueuedSubmission:
    values = {
        "id": record_id,
        "payload": {"fleetNumber": "T-107", "description": "engine overheating"},
        "enqueued_at": 1_700_000_000_000,
        "retry_count": 0,
    }
    values.update(overrides)
    return QueuedSubmission(**values)


def _insert_raw(store: OfflineStore, record_id: str, payload: str) -> None:
    with Session(store.engine) as session:
        session.add(OfflineIssueRecord(id=record_id, payload=payload, enqueued_at=1, retry_count=0))
        session.commit()


class TestOfflineStore:
    def test_put_then_get(self, store):
        store.put(_record())

        fetched = store.get("offline_1_abc")
        assert fetched == _record()
        assert fetched.payload["fleetNumber"] == "T-107"

    def test_get_missing_returns_none(self, store):
        assert store.get("offline_missing") is None

    def test_put_overwrites_same_id(self, store):
        store.put(_record())
        store.put(_record(retry_count=3))
        store.put(_record(retry_count=3))

        assert store.count() == 1
        assert store.get("offline_1_abc").retry_count == 3

    def test_list_returns_insertion_order(self, store):
        store.put(_record("offline_2_b", enqueued_at=2))
        store.put(_record("offline_1_a", enqueued_at=1))
        store.put(_record("offline_3_c", enqueued_at=3))

        assert [r.id for r in store.list()] == ["offline_1_a", "offline_2_b", "offline_3_c"]

    def test_delete_is_noop_when_absent(self, store):
        store.put(_record())

        assert store.delete("offline_1_abc") is True
        assert store.delete("offline_1_abc") is False
        assert store.count() == 0

    def test_clear_removes_everything(self, store):
        for idx in range(3):
            store.put(_record(f"offline_{idx}_x"))

        store.clear()

        assert store.count() == 0
        assert store.list() == []

    def test_records_survive_restart(self, db_url):
        first = OfflineStore.from_url(db_url)
        first.put(_record())
        first.close()

        second = OfflineStore.from_url(db_url)
        try:
            assert second.list() == [_record()]
        finally:
            second.close()

    def test_corrupt_row_is_reported_separately(self, store):
        store.put(_record())
        _insert_raw(store, "offline_2_bad", "{not json")
        _insert_raw(store, "offline_3_list", "[1, 2]")

        records, corrupt = store.scan()

        assert [r.id for r in records] == ["offline_1_abc"]
        assert sorted(corrupt) == ["offline_2_bad", "offline_3_list"]
        assert [r.id for r in store.list()] == ["offline_1_abc"]
        with pytest.raises(QueueCorruption):
            store.get("offline_2_bad")

    def test_storage_failure_raises_storage_error(self, store):
        SQLModel.metadata.drop_all(store.engine)

        with pytest.raises(StorageError):
            store.put(_record())
        with pytest.raises(StorageError):
            store.count()
