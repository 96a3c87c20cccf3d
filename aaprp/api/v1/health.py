"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text

from aaprp.api.deps import DbSession

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Returns service health status",
)
async def health_check() -> HealthResponse:
    """Check if the service is healthy."""
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns service readiness status, including database connectivity",
)
async def readiness_check(session: DbSession) -> HealthResponse:
    """Check if the service can reach its database."""
    await session.execute(text("SELECT 1"))
    return HealthResponse(status="ok")
