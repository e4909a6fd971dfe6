"""Database and payload models."""

from .issue import IssueReport
from .queue import OfflineIssueRecord, SyncStateEntry

__all__ = [
    "IssueReport",
    "OfflineIssueRecord",
    "SyncStateEntry",
]
