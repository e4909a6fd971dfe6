"""Test doubles shared across test modules."""

from __future__ import annotations

from typing import Any, Callable

from fleetsync.services.submission_client import SubmissionOutcome

OK = SubmissionOutcome(ok=True, status_code=201, body={"ticket": 1001})
UNAVAILABLE = SubmissionOutcome(ok=False, status_code=503, error="Service Unavailable")


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1) -> int:
        self.now += ms
        return self.now


class ScriptedSubmitter:
    """Returns (or raises) scripted results and records every payload it sees."""

    def __init__(
        self,
        *script: SubmissionOutcome | Exception,
        default: SubmissionOutcome | Exception = OK,
        by_payload: Callable[[dict[str, Any]], SubmissionOutcome | Exception | None] | None = None,
    ) -> None:
        self.script = list(script)
        self.default = default
        self.by_payload = by_payload
        self.payloads: list[dict[str, Any]] = []

    @property
    def calls(self) -> int:
        return len(self.payloads)

    def __call__(self, payload: dict[str, Any]) -> SubmissionOutcome:
        self.payloads.append(payload)
        result = None
        if self.by_payload is not None:
            result = self.by_payload(payload)
        if result is None:
            result = self.script.pop(0) if self.script else self.default
        if isinstance(result, Exception):
            raise result
        return result
