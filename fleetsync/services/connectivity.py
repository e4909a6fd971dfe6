"""Connectivity trigger: worker-to-page messaging and reconnect detection."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Deque

from fleetsync.services.notifications import NotificationLog
from fleetsync.services.submission_client import IssueSubmissionClient
from fleetsync.services.sync_engine import SyncEngine, SyncResult

logger = logging.getLogger(__name__)


class MessageKind(str, Enum):
    SYNC_ISSUES = "SYNC_ISSUES"
    UPDATE_AVAILABLE = "UPDATE_AVAILABLE"


@dataclass(frozen=True)
class WorkerMessage:
    kind: MessageKind
    payload: dict[str, Any] = field(default_factory=dict, hash=False)
    message_id: str = field(default_factory=lambda: uuid.uuid4().hex)


MessageHandler = Callable[[WorkerMessage], None]


class MessageChannel:
    """Delivers background-worker messages to the one handler registered by the page."""

    def __init__(self, seen_capacity: int = 256) -> None:
        self._handler: MessageHandler | None = None
        self._seen: Deque[str] = deque(maxlen=seen_capacity)
        self._lock = threading.Lock()

    @property
    def has_handler(self) -> bool:
        return self._handler is not None

    def register_handler(self, handler: MessageHandler) -> None:
        with self._lock:
            if self._handler is not None and self._handler is not handler:
                logger.warning("Replacing existing worker message handler")
            self._handler = handler

    def unregister(self) -> None:
        with self._lock:
            self._handler = None

    def post(self, message: WorkerMessage) -> bool:
        """Deliver ``message`` at most once. Returns whether it reached a handler."""
        with self._lock:
            handler = self._handler
            if handler is None:
                logger.info("No handler registered; dropping %s message", message.kind.value)
                return False
            if message.message_id in self._seen:
                logger.debug("Duplicate worker message %s ignored", message.message_id)
                return False
            self._seen.append(message.message_id)
        logger.info("Message from worker: %s", message.kind.value)
        handler(message)
        return True


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


class ConnectivityTrigger:
    """Turns worker messages into drain passes and user-facing notices."""

    def __init__(
        self,
        channel: MessageChannel,
        engine: SyncEngine,
        notifications: NotificationLog,
    ) -> None:
        self.channel = channel
        self.engine = engine
        self.notifications = notifications
        self.last_result: SyncResult | None = None
        channel.register_handler(self.handle)

    def handle(self, message: WorkerMessage) -> None:
        if message.kind is MessageKind.SYNC_ISSUES:
            self._sync()
        elif message.kind is MessageKind.UPDATE_AVAILABLE:
            self.notifications.add(
                "info",
                "App update available!",
                {"description": "Refresh to get the latest version", **message.payload},
            )

    def _sync(self) -> None:
        try:
            result = self.engine.request_drain()
        except Exception:
            logger.exception("Error retrying offline queue")
            self.notifications.add("error", "Failed to sync offline reports")
            return
        if result is None:
            return
        self.last_result = result
        if result.succeeded > 0:
            self.notifications.add(
                "success",
                f"{_plural(result.succeeded, 'offline report')} submitted successfully!",
            )

    def close(self) -> None:
        self.channel.unregister()


class ReconnectMonitor:
    """Background probe loop that requests a sync when connectivity returns."""

    def __init__(
        self,
        client: IssueSubmissionClient,
        channel: MessageChannel,
        poll_seconds: float = 30.0,
        periodic_sync_seconds: float = 0.0,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.channel = channel
        self.poll_seconds = poll_seconds
        self.periodic_sync_seconds = periodic_sync_seconds
        self.monotonic = monotonic
        self.is_online: bool | None = None
        self._last_periodic = monotonic()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def check_once(self) -> bool:
        """Probe once and post a sync request when appropriate. Returns whether one was posted."""
        online = self.client.probe()
        was_online = self.is_online
        self.is_online = online
        if not online:
            if was_online is not False:
                logger.info("Connectivity lost; queued reports will wait")
            return False

        now = self.monotonic()
        reason = None
        if was_online is not True:
            reason = "reconnect"
        elif self.periodic_sync_seconds > 0 and now - self._last_periodic >= self.periodic_sync_seconds:
            reason = "periodic"
        if reason is None:
            return False
        self._last_periodic = now
        logger.info("Requesting offline sync (reason=%s)", reason)
        return self.channel.post(WorkerMessage(MessageKind.SYNC_ISSUES, {"reason": reason}))

    def run_forever(self) -> None:
        logger.info(
            "Starting reconnect monitor (poll_interval=%.1fs, periodic_sync=%.1fs)",
            self.poll_seconds,
            self.periodic_sync_seconds,
        )
        while not self._stop.is_set():
            try:
                self.check_once()
            except Exception:  # pragma: no cover - defensive logging
                logger.exception("Reconnect monitor cycle failed")
            self._stop.wait(self.poll_seconds)
        logger.info("Reconnect monitor stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, name="reconnect-monitor", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None


__all__ = [
    "MessageKind",
    "WorkerMessage",
    "MessageChannel",
    "ConnectivityTrigger",
    "ReconnectMonitor",
]
