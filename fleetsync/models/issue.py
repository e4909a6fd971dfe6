"""Issue report schema accepted from drivers."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class IssueReport(BaseModel):
    """Fields of the driver issue form, serialised with the form's camelCase keys."""

    model_config = ConfigDict(extra="allow")

    driverName: str = Field(..., min_length=1, max_length=128)
    driverPhone: str | None = Field(default=None, max_length=32)
    fleetNumber: str = Field(..., min_length=1, max_length=32)
    primeRego: str | None = Field(default=None, max_length=32)
    trailerA: str | None = Field(default=None, max_length=32)
    trailerB: str | None = Field(default=None, max_length=32)
    category: str = Field(..., min_length=1, max_length=64)
    severity: Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
    description: str = Field(..., min_length=10)
    location: str | None = None
    safeToContinue: str | None = None
    preferredFrom: str | None = None
    preferredTo: str | None = None
    mediaUrls: list[str] | None = None

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


__all__ = ["IssueReport"]
