"""Wiring of the offline sync components for one process."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from fleetsync.core.config import Settings
from fleetsync.services.connectivity import ConnectivityTrigger, MessageChannel, ReconnectMonitor
from fleetsync.services.last_sync import LastSyncTracker
from fleetsync.services.notifications import NotificationLog
from fleetsync.services.offline_queue import OfflineQueue
from fleetsync.services.offline_store import OfflineStore
from fleetsync.services.reporting import IssueReportService
from fleetsync.services.submission_client import IssueSubmissionClient
from fleetsync.services.sync_engine import SyncEngine

logger = logging.getLogger(__name__)


@dataclass
class OfflineSyncContext:
    store: OfflineStore
    queue: OfflineQueue
    last_sync: LastSyncTracker
    client: IssueSubmissionClient
    engine: SyncEngine
    notifications: NotificationLog
    channel: MessageChannel
    trigger: ConnectivityTrigger
    monitor: ReconnectMonitor
    reports: IssueReportService

    def close(self) -> None:
        self.monitor.stop()
        self.trigger.close()
        self.client.close()
        self.store.close()


def build_context(settings: Settings, http_client: httpx.Client | None = None) -> OfflineSyncContext:
    """Construct a fresh set of components; nothing here is shared between contexts."""

    store = OfflineStore.from_url(settings.database_url)
    queue = OfflineQueue(store, id_prefix=settings.offline_id_prefix)
    last_sync = LastSyncTracker(store.engine)
    notifications = NotificationLog(max_items=settings.notifications_max_items)
    client = IssueSubmissionClient(
        settings.issues_endpoint_url,
        timeout=settings.submission_timeout,
        client=http_client,
        probe_url=settings.probe_url,
        probe_timeout=settings.connectivity_probe_timeout,
    )
    engine = SyncEngine(
        queue,
        client.submit,
        last_sync,
        retry_ceiling=settings.retry_ceiling,
        notifications=notifications,
        metrics_enabled=settings.metrics_enabled,
    )
    channel = MessageChannel()
    trigger = ConnectivityTrigger(channel, engine, notifications)
    monitor = ReconnectMonitor(
        client,
        channel,
        poll_seconds=settings.connectivity_poll_seconds,
        periodic_sync_seconds=settings.periodic_sync_seconds,
    )
    reports = IssueReportService(client, queue, is_offline=lambda: monitor.is_online is False)
    logger.info(
        "Offline sync context ready (store=%s, endpoint=%s, retry_ceiling=%s)",
        settings.database_url,
        settings.issues_endpoint_url,
        settings.retry_ceiling,
    )
    return OfflineSyncContext(
        store=store,
        queue=queue,
        last_sync=last_sync,
        client=client,
        engine=engine,
        notifications=notifications,
        channel=channel,
        trigger=trigger,
        monitor=monitor,
        reports=reports,
    )


__all__ = ["OfflineSyncContext", "build_context"]
