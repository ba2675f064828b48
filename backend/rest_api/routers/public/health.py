"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its database.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.config.settings import settings
from shared.config.logging import rest_api_logger as logger
from shared.infrastructure.db import SessionLocal


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "combo-engine",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check():
    """Health check that also verifies database connectivity."""
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "unreachable"},
        )
    return {"status": "healthy", "database": "ok"}
