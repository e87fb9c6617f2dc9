"""
Health Check Endpoints

Liveness text at ``/`` plus health and readiness checks for orchestration.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from marketplace.database.connection import Database, get_database

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def home() -> str:
    """API liveness text."""
    return "Hello World!"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    database: Database = Depends(get_database),
) -> HealthResponse:
    """
    Health check endpoint.

    Checks:
    - Application status
    - Database connectivity
    """
    settings = request.app.state.settings
    checks = {"database": await database.check_health()}
    overall_status = "healthy" if checks["database"].get("status") == "healthy" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 if the application is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(
    response: Response,
    database: Database = Depends(get_database),
) -> Dict[str, str]:
    """Returns 200 if the database is reachable, 503 otherwise."""
    db_health = await database.check_health()

    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}

    return {"status": "ready"}
