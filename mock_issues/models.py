"""Pydantic models for the mock issues API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class IssueCreate(BaseModel):
    category: str
    description: str
    severity: Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
    safeToContinue: str | None = None
    location: str | None = None
    fleetNumber: str
    primeRego: str | None = None
    trailerA: str | None = None
    trailerB: str | None = None
    driverName: str
    driverPhone: str | None = None
    preferredFrom: str | None = None
    preferredTo: str | None = None
    mediaUrls: list[str] | None = None


class IssueCreated(BaseModel):
    id: str
    ticket: int


class ControlUpdate(BaseModel):
    mode: Literal["online", "unavailable", "reject"] | None = None
    fail_rate: float | None = Field(default=None, ge=0.0, le=1.0)


__all__ = ["IssueCreate", "IssueCreated", "ControlUpdate"]
