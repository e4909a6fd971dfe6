"""API router definitions."""

from fastapi import APIRouter

from .offline import router as offline_router
from .reports import router as reports_router
from .routes import health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(reports_router)
api_router.include_router(offline_router)

__all__ = ["api_router"]
