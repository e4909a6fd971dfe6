"""Queue manager sitting between failed submissions and the offline store."""

from __future__ import annotations

import logging
import secrets
import string
from typing import Any, Callable

from fleetsync.services.offline_store import (
    OfflineStore,
    QueuedSubmission,
    encode_payload,
    now_ms,
)

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 9


def _random_suffix() -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))


class OfflineQueue:
    """Enqueue, list and remove pending issue reports.

    Ids have the form ``<prefix>_<epoch ms>_<9 base36 chars>`` and are checked
    against the store before use, so an id is never handed out twice while a
    record holding it is still queued.
    """

    def __init__(
        self,
        store: OfflineStore,
        id_prefix: str = "offline",
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.id_prefix = id_prefix
        self.clock = clock

    def _new_id(self, timestamp: int) -> str:
        while True:
            candidate = f"{self.id_prefix}_{timestamp}_{_random_suffix()}"
            if not self.store.contains(candidate):
                return candidate

    def enqueue(self, payload: dict[str, Any]) -> str:
        # Validate before touching the store so a bad payload never gets an id
        encode_payload(payload)
        timestamp = self.clock()
        record = QueuedSubmission(
            id=self._new_id(timestamp),
            payload=dict(payload),
            enqueued_at=timestamp,
            retry_count=0,
        )
        self.store.put(record)
        logger.info("Queued offline issue %s (queue_size=%s)", record.id, self.store.count())
        return record.id

    def dequeue(self, record_id: str) -> bool:
        removed = self.store.delete(record_id)
        if removed:
            logger.debug("Removed offline issue %s", record_id)
        return removed

    def requeue(self, record: QueuedSubmission) -> bool:
        """Persist an updated retry count unless the record was removed meanwhile."""
        if not self.store.contains(record.id):
            return False
        self.store.put(record)
        return True

    def list_pending(self) -> list[QueuedSubmission]:
        return self.store.list()

    def snapshot(self) -> tuple[list[QueuedSubmission], list[str]]:
        return self.store.scan()

    def get_queue_length(self) -> int:
        return self.store.count()

    def clear(self) -> None:
        self.store.clear()
        logger.info("Offline queue cleared")


__all__ = ["OfflineQueue"]
