"""Health check endpoint — no auth required."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.deps import get_database
from src.core.constants import HEALTH_STATUS_DOWN
from src.core.interfaces import DatabaseService
from src.core.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: DatabaseService = Depends(get_database)) -> JSONResponse:
    """Relay the database collaborator's status; 503 when it reports down."""
    try:
        report = await db.health()
    except Exception as exc:
        log.error("health_check_failed", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": HEALTH_STATUS_DOWN, "message": "database health check failed"},
        )

    code = status.HTTP_200_OK
    if report.get("status") == HEALTH_STATUS_DOWN:
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=report)
