"""
Health check endpoints.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from strideboard.core.config import settings
from strideboard.core.database import db_manager

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version
    }


@router.get("/health/detailed")
async def detailed_health_check():
    """Health check including database connectivity."""
    database_ok = await db_manager.health_check()
    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
        "checks": {"database": "healthy" if database_ok else "unhealthy"},
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body
    )
