"""Offline queue table models."""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, Text
from sqlmodel import Field, SQLModel


class OfflineIssueRecord(SQLModel, table=True):
    """One pending issue report persisted on the device."""

    __tablename__ = "offline_issues"

    id: str = Field(primary_key=True, max_length=64)
    payload: str = Field(sa_column=Column(Text, nullable=False), description="JSON-encoded issue body")
    enqueued_at: int = Field(sa_column=Column(BigInteger, nullable=False, index=True))
    retry_count: int = Field(default=0, nullable=False)


class SyncStateEntry(SQLModel, table=True):
    """Persisted scalar bookkeeping (e.g. last successful sync time)."""

    __tablename__ = "sync_state"

    key: str = Field(primary_key=True, max_length=64)
    value: str = Field(max_length=64)


__all__ = ["OfflineIssueRecord", "SyncStateEntry"]
