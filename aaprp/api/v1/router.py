"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from aaprp.api.v1 import assessments, audit, health, questionnaires

api_router = APIRouter()

api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

api_router.include_router(
    questionnaires.router,
    tags=["questionnaires"],
)

api_router.include_router(
    assessments.router,
    tags=["assessments"],
)

api_router.include_router(
    audit.router,
    prefix="/audit",
    tags=["audit"],
)
