"""Persisted timestamp of the most recent successful drain pass."""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from fleetsync.db.session import get_session
from fleetsync.models import SyncStateEntry
from fleetsync.services.offline_store import storage_errors

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "last-offline-sync"


class LastSyncTracker:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def get_last_sync_time(self) -> int | None:
        with storage_errors("read last sync"), get_session(self.engine) as session:
            entry = session.get(SyncStateEntry, LAST_SYNC_KEY)
        if entry is None:
            return None
        try:
            return int(entry.value)
        except ValueError:
            logger.warning("Ignoring malformed last sync value %r", entry.value)
            return None

    def set_last_sync_time(self, timestamp_ms: int) -> None:
        with storage_errors("write last sync"), get_session(self.engine) as session:
            entry = session.get(SyncStateEntry, LAST_SYNC_KEY)
            if entry is None:
                entry = SyncStateEntry(key=LAST_SYNC_KEY, value=str(int(timestamp_ms)))
            else:
                entry.value = str(int(timestamp_ms))
            session.add(entry)
            session.commit()


__all__ = ["LastSyncTracker", "LAST_SYNC_KEY"]
