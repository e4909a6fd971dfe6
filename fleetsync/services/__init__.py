"""Service-layer utilities."""

from .connectivity import ConnectivityTrigger, MessageChannel, MessageKind, ReconnectMonitor, WorkerMessage
from .context import OfflineSyncContext, build_context
from .last_sync import LastSyncTracker
from .notifications import Notification, NotificationLog
from .offline_queue import OfflineQueue
from .offline_store import OfflineStore, QueuedSubmission
from .reporting import IssueReportService, SubmitReceipt
from .submission_client import IssueSubmissionClient, SubmissionOutcome
from .sync_engine import SyncEngine, SyncResult

__all__ = [
    "ConnectivityTrigger",
    "MessageChannel",
    "MessageKind",
    "ReconnectMonitor",
    "WorkerMessage",
    "OfflineSyncContext",
    "build_context",
    "LastSyncTracker",
    "Notification",
    "NotificationLog",
    "OfflineQueue",
    "OfflineStore",
    "QueuedSubmission",
    "IssueReportService",
    "SubmitReceipt",
    "IssueSubmissionClient",
    "SubmissionOutcome",
    "SyncEngine",
    "SyncResult",
]
