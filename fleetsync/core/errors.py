"""Error types raised by the offline queue and submission flow."""

from __future__ import annotations


class OfflineSyncError(Exception):
    """Base class for offline queue errors."""


class StorageError(OfflineSyncError):
    """The device store is unavailable or a read/write failed."""


class QueueCorruption(OfflineSyncError):
    """A persisted record could not be decoded."""

    def __init__(self, record_id: str, reason: str) -> None:
        super().__init__(f"Queued record {record_id} is corrupt: {reason}")
        self.record_id = record_id
        self.reason = reason


class InvalidPayload(OfflineSyncError, ValueError):
    """Payload is not a JSON-serialisable mapping."""


class SubmissionRejected(OfflineSyncError):
    """The issues endpoint answered a live submission with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


__all__ = [
    "OfflineSyncError",
    "StorageError",
    "QueueCorruption",
    "InvalidPayload",
    "SubmissionRejected",
]
