"""FastAPI application for the fleet offline sync service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fleetsync.api import api_router
from fleetsync.core.config import Settings, settings as default_settings
from fleetsync.core.errors import InvalidPayload, StorageError
from fleetsync.core.logging_config import setup_logging
from fleetsync.services.context import build_context


def create_app(
    app_settings: Settings | None = None,
    http_client: httpx.Client | None = None,
) -> FastAPI:
    setup_logging()
    logger = logging.getLogger(__name__)
    cfg = app_settings or default_settings
    ctx = build_context(cfg, http_client=http_client)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if cfg.start_monitor:
            ctx.monitor.start()
        try:
            yield
        finally:
            ctx.close()

    app = FastAPI(title=cfg.app_name, version=cfg.app_version, lifespan=lifespan)
    app.state.offline = ctx
    app.include_router(api_router, prefix=cfg.api_prefix)

    @app.exception_handler(StorageError)
    async def _storage_error(_: Request, exc: StorageError) -> JSONResponse:
        logger.error("Offline store unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"detail": "offline_store_unavailable"})

    @app.exception_handler(InvalidPayload)
    async def _invalid_payload(_: Request, exc: InvalidPayload) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Provide a friendly landing response for the bare hostname."""

        return {
            "message": (
                f"{cfg.app_name} is online. Try GET "
                f"{cfg.api_prefix}/offline/status for queue status."
            )
        }

    logger.info("Initialized %s API", cfg.app_name)
    return app


if __name__ == "__main__":  # pragma: no cover - manual launch
    import uvicorn

    uvicorn.run("fleetsync.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=False)
