"""Health check endpoints."""

from fastapi import APIRouter
from sqlalchemy import text

from storerate.core.config import settings
from storerate.core.deps import DBSession
from storerate.schemas.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DBSession) -> HealthResponse:
    """
    Health check endpoint.

    Checks database connectivity and returns service status.
    """
    checks: dict[str, str] = {}
    status = "healthy"

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        status = "unhealthy"
        checks["database"] = f"unhealthy: {e}"

    return HealthResponse(
        status=status,
        version=settings.version,
        environment=settings.environment,
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Liveness probe: the process is up and serving requests."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(db: DBSession) -> dict[str, str]:
    """Readiness probe: the database answers queries."""
    await db.execute(text("SELECT 1"))
    return {"status": "ready"}
