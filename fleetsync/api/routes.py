"""Root API routers."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from fleetsync.api.deps import get_context
from fleetsync.core.logging_config import get_log_buffer
from fleetsync.services.context import OfflineSyncContext

health_router = APIRouter(tags=["system"])


@health_router.get("/health", summary="Service health probe")
async def healthcheck() -> dict[str, str]:
    """Return a simple heartbeat for orchestration layers."""

    return {"status": "ok"}


@health_router.get("/logs", summary="Recent log entries")
def recent_logs(
    limit: int = Query(default=100, ge=1, le=200),
    level: str | None = Query(default=None, pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$"),
) -> list[dict[str, Any]]:
    return get_log_buffer(limit, min_level=level)


@health_router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@health_router.get("/notifications", summary="Recent user-facing notifications")
def notifications(
    limit: int | None = Query(default=None, ge=1),
    ctx: OfflineSyncContext = Depends(get_context),
) -> list[dict[str, Any]]:
    return [note.to_dict() for note in ctx.notifications.recent(limit)]
