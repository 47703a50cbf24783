"""Health & Readiness Probes.

Invariants:
    - GET /v1/healthcheck always returns 200 if the process is up (liveness)
    - GET /v1/healthcheck/ready returns 503 if the database is unreachable (readiness)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from dotareplays.config import Settings, get_settings
from dotareplays.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1/healthcheck", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def healthcheck(settings: Settings = Depends(get_settings)):
    """Basic liveness probe."""
    return {
        "status": "available",
        "system_info": {
            "environment": settings.environment,
            "version": settings.version,
        },
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe — includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
