"""Offline queue endpoints used by the report page and the background worker."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from fleetsync.api.deps import get_context
from fleetsync.models import IssueReport
from fleetsync.services.connectivity import MessageKind, WorkerMessage
from fleetsync.services.context import OfflineSyncContext

router = APIRouter(prefix="/offline", tags=["offline"])


class WorkerMessagePayload(BaseModel):
    type: MessageKind
    id: str | None = Field(default=None, max_length=128)
    data: dict[str, Any] = Field(default_factory=dict)


@router.post("/queue", status_code=status.HTTP_201_CREATED)
def enqueue_report(report: IssueReport, ctx: OfflineSyncContext = Depends(get_context)) -> dict[str, Any]:
    record_id = ctx.queue.enqueue(report.to_payload())
    return {"id": record_id, "queue_length": ctx.queue.get_queue_length()}


@router.get("/queue")
def list_pending(ctx: OfflineSyncContext = Depends(get_context)) -> list[dict[str, Any]]:
    return [record.to_dict() for record in ctx.queue.list_pending()]


@router.get("/queue/length")
def queue_length(ctx: OfflineSyncContext = Depends(get_context)) -> dict[str, int]:
    return {"queue_length": ctx.queue.get_queue_length()}


@router.delete("/queue/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_queued(record_id: str, ctx: OfflineSyncContext = Depends(get_context)) -> Response:
    if not ctx.queue.dequeue(record_id):
        raise HTTPException(status_code=404, detail="queued_report_not_found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/queue", status_code=status.HTTP_204_NO_CONTENT)
def clear_queue(ctx: OfflineSyncContext = Depends(get_context)) -> Response:
    ctx.queue.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sync")
def run_sync(ctx: OfflineSyncContext = Depends(get_context)) -> dict[str, Any]:
    result = ctx.engine.run_drain_pass()
    return {
        **result.to_dict(),
        "queue_length": ctx.queue.get_queue_length(),
        "last_sync_time": ctx.last_sync.get_last_sync_time(),
    }


@router.get("/status")
def sync_status(ctx: OfflineSyncContext = Depends(get_context)) -> dict[str, Any]:
    return {
        "queue_length": ctx.queue.get_queue_length(),
        "last_sync_time": ctx.last_sync.get_last_sync_time(),
        "draining": ctx.engine.is_draining,
        "online": ctx.monitor.is_online,
    }


@router.post("/events")
def worker_event(payload: WorkerMessagePayload, ctx: OfflineSyncContext = Depends(get_context)) -> dict[str, bool]:
    message = (
        WorkerMessage(payload.type, payload.data, message_id=payload.id)
        if payload.id
        else WorkerMessage(payload.type, payload.data)
    )
    return {"delivered": ctx.channel.post(message)}
