"""Tests for the submit-or-queue flow."""

from __future__ import annotations

import httpx
import pytest

from fleetsync.core.errors import SubmissionRejected
from fleetsync.services.reporting import RATE_LIMITED_MESSAGE, IssueReportService
from fleetsync.services.submission_client import IssueSubmissionClient

REPORT = {"fleetNumber": "T-107", "description": "engine overheating"}


def _service(queue, handler, is_offline=None) -> IssueReportService:
    client = IssueSubmissionClient(
        "http://fleet.test/api/issues",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    return IssueReportService(client, queue, is_offline=is_offline)


def test_live_submission_returns_ticket(queue):
    receipt = _service(queue, lambda request: httpx.Response(201, json={"ticket": 1042})).submit(REPORT)

    assert receipt.status == "submitted"
    assert receipt.ticket == 1042
    assert queue.get_queue_length() == 0


def test_network_error_queues_report(queue):
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    receipt = _service(queue, handler).submit(REPORT)

    assert receipt.status == "queued"
    [pending] = queue.list_pending()
    assert pending.id == receipt.queue_id
    assert pending.payload == REPORT


def test_known_offline_skips_the_network(queue):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201, json={"ticket": 1})

    receipt = _service(queue, handler, is_offline=lambda: True).submit(REPORT)

    assert receipt.status == "queued"
    assert calls == []


def test_rate_limit_is_rejected_with_friendly_message(queue):
    with pytest.raises(SubmissionRejected) as excinfo:
        _service(queue, lambda request: httpx.Response(429, json={"error": "slow down"})).submit(REPORT)

    assert excinfo.value.status_code == 429
    assert excinfo.value.message == RATE_LIMITED_MESSAGE
    assert queue.get_queue_length() == 0


def test_validation_error_is_not_queued(queue):
    with pytest.raises(SubmissionRejected) as excinfo:
        _service(queue, lambda request: httpx.Response(400, json={"error": "Invalid issue data"})).submit(REPORT)

    assert excinfo.value.message == "Invalid issue data"
    assert queue.get_queue_length() == 0
