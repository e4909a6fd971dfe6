"""Drain the offline queue against the issues endpoint with bounded retries."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from prometheus_client import Counter, Gauge, Histogram

from fleetsync.core.logging_config import drain_pass_context
from fleetsync.services.last_sync import LastSyncTracker
from fleetsync.services.notifications import NotificationLog
from fleetsync.services.offline_queue import OfflineQueue
from fleetsync.services.offline_store import QueuedSubmission, now_ms
from fleetsync.services.submission_client import SubmissionOutcome

logger = logging.getLogger(__name__)

DEFAULT_RETRY_CEILING = 5

DRAIN_PASSES_TOTAL = Counter(
    "fleetsync_drain_passes_total",
    "Completed drain passes over the offline queue.",
)
SUBMISSIONS_SUCCEEDED = Counter(
    "fleetsync_submissions_succeeded_total",
    "Queued issue reports accepted by the issues endpoint.",
)
SUBMISSION_FAILURES = Counter(
    "fleetsync_submission_failures_total",
    "Failed submission attempts for queued issue reports.",
)
SUBMISSIONS_ABANDONED = Counter(
    "fleetsync_submissions_abandoned_total",
    "Queued issue reports dropped after exceeding the retry ceiling or being corrupt.",
)
DRAIN_PASS_SECONDS = Histogram(
    "fleetsync_drain_pass_seconds",
    "Wall-clock duration of each drain pass.",
)
QUEUE_LENGTH = Gauge(
    "fleetsync_queue_length",
    "Offline issue reports still pending after the latest drain pass.",
)

Submitter = Callable[[dict[str, Any]], SubmissionOutcome]


class RecordState(str, Enum):
    PENDING = "pending"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    RETRY_SCHEDULED = "retry_scheduled"
    ABANDONED = "abandoned"


@dataclass
class SyncResult:
    succeeded: int = 0
    permanently_failed: int = 0
    retried: int = 0
    passes: int = 0
    abandoned_ids: list[str] = field(default_factory=list)

    def merge(self, other: "SyncResult") -> "SyncResult":
        return SyncResult(
            succeeded=self.succeeded + other.succeeded,
            permanently_failed=self.permanently_failed + other.permanently_failed,
            retried=self.retried + other.retried,
            passes=self.passes + other.passes,
            abandoned_ids=[*self.abandoned_ids, *other.abandoned_ids],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "permanently_failed": self.permanently_failed,
            "retried": self.retried,
            "passes": self.passes,
        }


class SyncEngine:
    """Submit every queued record once per pass, never running two passes at once.

    A record whose attempt fails has its retry count incremented and written
    back; once the count exceeds ``retry_ceiling`` the record is dropped. With
    the default ceiling of 5 a record gets six attempts in total.
    """

    def __init__(
        self,
        queue: OfflineQueue,
        submit: Submitter,
        last_sync: LastSyncTracker,
        retry_ceiling: int = DEFAULT_RETRY_CEILING,
        notifications: NotificationLog | None = None,
        clock: Callable[[], int] = now_ms,
        metrics_enabled: bool = False,
    ) -> None:
        self.queue = queue
        self.submit = submit
        self.last_sync = last_sync
        self.retry_ceiling = retry_ceiling
        self.notifications = notifications
        self.clock = clock
        self._metrics_enabled = metrics_enabled
        self._cond = threading.Condition()
        self._draining = False
        self._follow_up = False
        self._pass_seq = 0

    @property
    def is_draining(self) -> bool:
        with self._cond:
            return self._draining

    def run_drain_pass(self) -> SyncResult:
        """Run a pass now, waiting for any in-flight pass to finish first."""
        self._begin(wait=True)
        return self._drain_until_settled()

    def request_drain(self) -> SyncResult | None:
        """Run a pass unless one is in flight; then schedule a single follow-up instead."""
        if not self._begin(wait=False):
            return None
        return self._drain_until_settled()

    def _begin(self, wait: bool) -> bool:
        with self._cond:
            if self._draining and not wait:
                self._follow_up = True
                logger.info("Drain already in progress; sync request coalesced")
                return False
            while self._draining:
                self._cond.wait()
            self._draining = True
            return True

    def _drain_until_settled(self) -> SyncResult:
        result = SyncResult()
        try:
            while True:
                result = result.merge(self._drain_once())
                with self._cond:
                    if not self._follow_up:
                        self._draining = False
                        self._cond.notify_all()
                        return result
                    self._follow_up = False
                logger.info("Running follow-up drain pass for coalesced sync request")
        except BaseException:
            with self._cond:
                self._draining = False
                # Requests coalesced into the failed pass are not carried over
                self._follow_up = False
                self._cond.notify_all()
            raise

    def _drain_once(self) -> SyncResult:
        self._pass_seq += 1
        with drain_pass_context(self._pass_seq):
            return self._run_pass()

    def _run_pass(self) -> SyncResult:
        started = time.perf_counter()
        records, corrupt_ids = self.queue.snapshot()
        result = SyncResult(passes=1)

        for record_id in corrupt_ids:
            self.queue.dequeue(record_id)
            result.permanently_failed += 1
            result.abandoned_ids.append(record_id)
            logger.error("Dropped corrupt offline issue %s", record_id, extra={"queue_id": record_id})

        for record in records:
            state = self._process(record)
            if state is RecordState.SUCCEEDED:
                result.succeeded += 1
            elif state is RecordState.ABANDONED:
                result.permanently_failed += 1
                result.abandoned_ids.append(record.id)
            elif state is RecordState.RETRY_SCHEDULED:
                result.retried += 1

        self.last_sync.set_last_sync_time(self.clock())
        logger.info(
            "Drain pass completed (queued=%s, succeeded=%s, retried=%s, abandoned=%s)",
            len(records) + len(corrupt_ids),
            result.succeeded,
            result.retried,
            result.permanently_failed,
        )
        if result.abandoned_ids and self.notifications is not None:
            count = len(result.abandoned_ids)
            self.notifications.add(
                "error",
                f"{count} report{'s' if count != 1 else ''} failed to sync. "
                "Please check your submissions.",
                {"ids": list(result.abandoned_ids)},
            )
        self._record_metrics(result, time.perf_counter() - started)
        return result

    def _process(self, record: QueuedSubmission) -> RecordState:
        extra = {"queue_id": record.id}
        logger.debug("Offline issue %s: %s", record.id, RecordState.SUBMITTING.value, extra=extra)
        try:
            outcome = self.submit(record.payload)
        except Exception as exc:
            logger.exception("Unexpected error submitting offline issue %s", record.id, extra=extra)
            outcome = SubmissionOutcome(ok=False, error=str(exc) or exc.__class__.__name__)

        if outcome.ok:
            self.queue.dequeue(record.id)
            logger.info("Offline issue synced: %s (status=%s)", record.id, outcome.status_code, extra=extra)
            return RecordState.SUCCEEDED

        updated = record.with_failed_attempt()
        if updated.retry_count > self.retry_ceiling:
            self.queue.dequeue(record.id)
            logger.error(
                "Giving up on offline issue %s after %s retries: %s",
                record.id,
                self.retry_ceiling,
                outcome.error,
                extra=extra,
            )
            return RecordState.ABANDONED

        if not self.queue.requeue(updated):
            # Removed by the user while this attempt was in flight
            logger.info("Offline issue %s was removed during sync", record.id, extra=extra)
            return RecordState.PENDING
        logger.warning(
            "Failed to sync offline issue %s (attempt %s/%s, status=%s): %s",
            record.id,
            updated.retry_count,
            self.retry_ceiling + 1,
            outcome.status_code,
            outcome.error,
            extra=extra,
        )
        return RecordState.RETRY_SCHEDULED

    def _record_metrics(self, result: SyncResult, duration: float) -> None:
        if not self._metrics_enabled:
            return
        DRAIN_PASSES_TOTAL.inc()
        DRAIN_PASS_SECONDS.observe(duration)
        SUBMISSIONS_SUCCEEDED.inc(result.succeeded)
        SUBMISSION_FAILURES.inc(result.retried + result.permanently_failed)
        SUBMISSIONS_ABANDONED.inc(result.permanently_failed)
        QUEUE_LENGTH.set(self.queue.get_queue_length())


__all__ = ["SyncEngine", "SyncResult", "RecordState", "DEFAULT_RETRY_CEILING"]
