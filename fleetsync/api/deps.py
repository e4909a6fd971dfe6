"""API dependencies."""

from __future__ import annotations

from fastapi import Request

from fleetsync.services.context import OfflineSyncContext


def get_context(request: Request) -> OfflineSyncContext:
    return request.app.state.offline
