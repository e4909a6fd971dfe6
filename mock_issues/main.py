"""Mock fleet issues FastAPI service."""

from __future__ import annotations

import logging
import random
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .models import ControlUpdate, IssueCreate, IssueCreated
from .state import STATE

logger = logging.getLogger("mock_issues")
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

app = FastAPI(title="Mock Fleet Issues", version="0.1.0")
API_PREFIX = "/api"


async def log_middleware(request: Request, call_next: Callable[[Request], Awaitable[Any]]):
    logger.info("%s %s", request.method, request.url.path)
    response = await call_next(request)
    logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


app.middleware("http")(log_middleware)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid issue data", "details": exc.errors()})


@app.get(f"{API_PREFIX}/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "mode": STATE.mode}


@app.post(f"{API_PREFIX}/issues", status_code=201, response_model=IssueCreated)
async def create_issue(issue: IssueCreate) -> Any:
    if STATE.mode == "unavailable":
        return _error("Database connection is not configured.", 503)
    if STATE.mode == "reject":
        return _error("Invalid issue data", 400)
    if STATE.fail_rate and random.random() < STATE.fail_rate:
        return _error("Failed to create issue", 500)
    stored = STATE.record(issue.model_dump(exclude_none=True))
    logger.info("Issue %s created for fleet %s", stored["ticket"], issue.fleetNumber)
    return IssueCreated(id=stored["id"], ticket=stored["ticket"])


@app.get(f"{API_PREFIX}/issues")
async def list_issues() -> list[dict[str, Any]]:
    return list(STATE.issues)


@app.post(f"{API_PREFIX}/control")
async def control(update: ControlUpdate) -> dict[str, Any]:
    if update.mode is not None:
        STATE.mode = update.mode
    if update.fail_rate is not None:
        STATE.fail_rate = update.fail_rate
    logger.info("Mock mode=%s fail_rate=%s", STATE.mode, STATE.fail_rate)
    return {"mode": STATE.mode, "fail_rate": STATE.fail_rate}


@app.post(f"{API_PREFIX}/control/reset")
async def reset() -> dict[str, Any]:
    STATE.reset()
    return {"mode": STATE.mode, "fail_rate": STATE.fail_rate}


if __name__ == "__main__":  # pragma: no cover - manual launch
    import uvicorn

    uvicorn.run("mock_issues.main:app", host="0.0.0.0", port=settings.port, reload=False)
