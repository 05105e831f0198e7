"""Health check endpoints for monitoring application status."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shrink.api import schemas
from shrink.core.config import settings
from shrink.db.base import DatabaseHealthCheck
from shrink.db.session import get_db

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=schemas.HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def health_check():
    """Simple check that application is running."""
    return schemas.HealthResponse(
        status="ok",
        message=f"{settings.APP_NAME} is running",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT.value,
    )


@router.get(
    "/health/ready",
    response_model=schemas.ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
)
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Check if the store is reachable."""
    database = await DatabaseHealthCheck.check_connection(db)
    return schemas.ReadinessResponse(
        ready=database["status"] == "healthy",
        components={"api": {"status": "healthy"}, "database": database},
    )
