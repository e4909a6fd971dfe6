"""Driver issue report submission."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status

from fleetsync.api.deps import get_context
from fleetsync.core.errors import SubmissionRejected
from fleetsync.models import IssueReport
from fleetsync.services.context import OfflineSyncContext

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_report(
    report: IssueReport,
    response: Response,
    ctx: OfflineSyncContext = Depends(get_context),
) -> dict[str, Any]:
    try:
        receipt = ctx.reports.submit(report.to_payload())
    except SubmissionRejected as exc:
        raise HTTPException(status_code=exc.status_code or 502, detail=exc.message) from exc
    if receipt.status == "queued":
        response.status_code = status.HTTP_202_ACCEPTED
    return receipt.to_dict()
