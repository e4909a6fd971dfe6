"""Durable device-local store of pending issue submissions."""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from sqlalchemy import delete, func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from fleetsync.core.errors import InvalidPayload, QueueCorruption, StorageError
from fleetsync.db.session import create_db_engine, get_session, init_db
from fleetsync.models import OfflineIssueRecord

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class QueuedSubmission:
    id: str
    payload: dict[str, Any] = field(hash=False)
    enqueued_at: int
    retry_count: int = 0

    def with_failed_attempt(self) -> "QueuedSubmission":
        return replace(self, retry_count=self.retry_count + 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "payload": self.payload,
            "enqueued_at": self.enqueued_at,
            "retry_count": self.retry_count,
        }


def encode_payload(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise InvalidPayload(f"payload must be a mapping, got {type(payload).__name__}")
    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise InvalidPayload(f"payload is not JSON serialisable: {exc}") from exc


def _decode(row: OfflineIssueRecord) -> QueuedSubmission:
    try:
        payload = json.loads(row.payload)
    except (TypeError, ValueError) as exc:
        raise QueueCorruption(row.id, f"undecodable payload ({exc})") from exc
    if not isinstance(payload, dict):
        raise QueueCorruption(row.id, "payload is not an object")
    return QueuedSubmission(
        id=row.id,
        payload=payload,
        enqueued_at=row.enqueued_at,
        retry_count=row.retry_count,
    )


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Offline store %s failed: %s", action, exc)
        raise StorageError(f"offline store {action} failed: {exc}") from exc


class OfflineStore:
    """Key-value store of queued submissions backed by SQLModel.

    The store owns its engine; build one per process (or per test) and pass
    it to the components that need it.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        with storage_errors("initialise"):
            init_db(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "OfflineStore":
        with storage_errors("connect"):
            engine = create_db_engine(database_url)
        return cls(engine)

    def put(self, record: QueuedSubmission) -> None:
        """Insert or overwrite ``record`` keyed by its id."""
        encoded = encode_payload(record.payload)
        with storage_errors("put"), get_session(self.engine) as session:
            row = session.get(OfflineIssueRecord, record.id)
            if row is None:
                row = OfflineIssueRecord(
                    id=record.id,
                    payload=encoded,
                    enqueued_at=record.enqueued_at,
                    retry_count=record.retry_count,
                )
            else:
                row.payload = encoded
                row.enqueued_at = record.enqueued_at
                row.retry_count = record.retry_count
            session.add(row)
            session.commit()

    def contains(self, record_id: str) -> bool:
        with storage_errors("get"), get_session(self.engine) as session:
            return session.get(OfflineIssueRecord, record_id) is not None

    def get(self, record_id: str) -> QueuedSubmission | None:
        """Return the record or None; raises QueueCorruption for undecodable rows."""
        with storage_errors("get"), get_session(self.engine) as session:
            row = session.get(OfflineIssueRecord, record_id)
        if row is None:
            return None
        return _decode(row)

    def scan(self) -> tuple[list[QueuedSubmission], list[str]]:
        """Return decodable records plus the ids of corrupt rows."""
        with storage_errors("list"), get_session(self.engine) as session:
            rows = session.exec(
                select(OfflineIssueRecord).order_by(
                    OfflineIssueRecord.enqueued_at, OfflineIssueRecord.id
                )
            ).all()
        records: list[QueuedSubmission] = []
        corrupt: list[str] = []
        for row in rows:
            try:
                records.append(_decode(row))
            except QueueCorruption as exc:
                logger.error("%s", exc)
                corrupt.append(row.id)
        return records, corrupt

    def list(self) -> list[QueuedSubmission]:
        records, _ = self.scan()
        return records

    def delete(self, record_id: str) -> bool:
        """Remove the record if present. Returns whether a row was deleted."""
        with storage_errors("delete"), get_session(self.engine) as session:
            row = session.get(OfflineIssueRecord, record_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def clear(self) -> None:
        with storage_errors("clear"), get_session(self.engine) as session:
            session.exec(delete(OfflineIssueRecord))
            session.commit()

    def count(self) -> int:
        with storage_errors("count"), get_session(self.engine) as session:
            return session.exec(select(func.count()).select_from(OfflineIssueRecord)).one()

    def close(self) -> None:
        self.engine.dispose()


__all__ = ["OfflineStore", "QueuedSubmission", "encode_payload", "now_ms", "storage_errors"]
