"""Submit an issue report live, falling back to the offline queue."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from fleetsync.core.errors import SubmissionRejected
from fleetsync.services.offline_queue import OfflineQueue
from fleetsync.services.submission_client import IssueSubmissionClient

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment and try again."


@dataclass
class SubmitReceipt:
    status: str  # submitted|queued
    ticket: Any = None
    queue_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "ticket": self.ticket, "queue_id": self.queue_id}


class IssueReportService:
    def __init__(
        self,
        client: IssueSubmissionClient,
        queue: OfflineQueue,
        is_offline: Callable[[], bool] | None = None,
    ) -> None:
        self.client = client
        self.queue = queue
        self.is_offline = is_offline or (lambda: False)

    def submit(self, payload: dict[str, Any]) -> SubmitReceipt:
        if self.is_offline():
            return self._queue(payload, "device offline")

        outcome = self.client.submit(payload)
        if outcome.ok:
            ticket = outcome.body.get("ticket") if isinstance(outcome.body, dict) else None
            logger.info("Issue report submitted (ticket=%s)", ticket)
            return SubmitReceipt(status="submitted", ticket=ticket)
        if outcome.network_error:
            return self._queue(payload, outcome.error or "network error")

        status = outcome.status_code or 0
        if status == 429:
            raise SubmissionRejected(status, RATE_LIMITED_MESSAGE)
        raise SubmissionRejected(status, outcome.error or "Failed to submit report")

    def _queue(self, payload: dict[str, Any], reason: str) -> SubmitReceipt:
        queue_id = self.queue.enqueue(payload)
        logger.info("Report saved offline (%s); will submit on reconnect: %s", reason, queue_id)
        return SubmitReceipt(status="queued", queue_id=queue_id)


__all__ = ["IssueReportService", "SubmitReceipt", "RATE_LIMITED_MESSAGE"]
