"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_store
from api.models.responses import HealthResponse
from core.config import API_VERSION
from core.database import SQLiteEntityStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(store: SQLiteEntityStore = Depends(get_store)):
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if unhealthy.
    """
    database_available = store.is_available()
    timestamp = datetime.now(timezone.utc).isoformat()

    if database_available:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            database_available=True,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                database_available=False,
                timestamp=timestamp,
                error="Planner database not found",
            ).model_dump(),
        )
