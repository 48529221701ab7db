"""FastAPI dependencies for authentication and shared resources."""

import secrets

from fastapi import Depends, Header, HTTPException, status

from core.config import DB_PATH, PLANNER_API_KEY
from core.database import SQLiteEntityStore
from services.scheduler import PlanningSnapshot, Scheduler


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not PLANNER_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, PLANNER_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key


def get_store() -> SQLiteEntityStore:
    """Planner database collaborator."""
    return SQLiteEntityStore(DB_PATH)


async def get_snapshot(store: SQLiteEntityStore = Depends(get_store)) -> PlanningSnapshot:
    """Fresh in-memory snapshot of every planning record."""
    tasks, campaigns, projects = await store.load()
    return PlanningSnapshot(tasks=tasks, campaigns=campaigns, projects=projects)


def get_scheduler(store: SQLiteEntityStore = Depends(get_store)) -> Scheduler:
    return Scheduler(store)
