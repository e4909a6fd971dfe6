"""In-memory state container for the mock issues service."""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from .config import settings


class IssueBoard:
    """Received issues plus the failure mode the endpoint should simulate."""

    def __init__(self, mode: str = "online", fail_rate: float = 0.0) -> None:
        self.mode = mode
        self.fail_rate = fail_rate
        self.issues: list[dict[str, Any]] = []
        self._next_ticket = 1000
        self._lock = threading.Lock()

    def record(self, issue: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self._next_ticket += 1
            stored = {
                **issue,
                "id": uuid.uuid4().hex,
                "ticket": self._next_ticket,
                "status": "PENDING",
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
            self.issues.append(stored)
        return stored

    def reset(self) -> None:
        with self._lock:
            self.issues.clear()
            self._next_ticket = 1000
            self.mode = settings.initial_mode
            self.fail_rate = settings.fail_rate


STATE = IssueBoard(mode=settings.initial_mode, fail_rate=settings.fail_rate)

__all__ = ["STATE", "IssueBoard"]
