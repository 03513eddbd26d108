"""
Health check endpoints.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
import logging

from club_api.config import Settings
from club_api.database import AppContext, get_app_settings, get_context
from club_api.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Liveness check; does not touch the database."""
    logger.debug("Health check requested")
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        service=settings.API_TITLE,
        version=settings.API_VERSION,
    )


@router.get("/health/db")
async def health_check_db(context: AppContext = Depends(get_context)):
    """
    Database health check endpoint.
    Tests database connection and returns status.
    """
    try:
        result = await context.database.ping()
        return {
            "database": "connected",
            "status": "healthy",
            "result": result
        }
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}", exc_info=True)
        return {
            "database": "error",
            "status": "unhealthy",
            "error": "Database connection failed"
        }
