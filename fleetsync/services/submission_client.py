"""HTTP client for the remote fleet issues endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    ok: bool
    status_code: int | None = None
    error: str | None = None
    body: Any = None
    network_error: bool = False


def _read_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class IssueSubmissionClient:
    """Thin wrapper around ``POST <issues endpoint>``."""

    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
        probe_url: str | None = None,
        probe_timeout: float = 5.0,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self.probe_url = probe_url or endpoint_url
        self.probe_timeout = probe_timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def submit(self, payload: dict[str, Any]) -> SubmissionOutcome:
        """POST ``payload`` as JSON. Transport errors become a failed outcome."""
        try:
            response = self._client.post(
                self.endpoint_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except httpx.RequestError as exc:
            logger.warning("Issue submission transport error: %s", exc)
            return SubmissionOutcome(ok=False, error=str(exc) or exc.__class__.__name__, network_error=True)

        body = _read_body(response)
        if response.is_success:
            return SubmissionOutcome(ok=True, status_code=response.status_code, body=body)

        message = body.get("error") if isinstance(body, dict) else None
        return SubmissionOutcome(
            ok=False,
            status_code=response.status_code,
            error=message or response.reason_phrase or f"HTTP {response.status_code}",
            body=body,
        )

    def probe(self) -> bool:
        """Return True when the endpoint host answers at all."""
        try:
            self._client.get(self.probe_url, timeout=self.probe_timeout)
        except httpx.RequestError as exc:
            logger.debug("Connectivity probe failed: %s", exc)
            return False
        return True

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__ = ["IssueSubmissionClient", "SubmissionOutcome"]
