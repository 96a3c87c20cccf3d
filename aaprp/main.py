"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aaprp import __version__
from aaprp.api.v1.router import api_router
from aaprp.core.config import settings
from aaprp.core.exceptions import AssessmentError
from aaprp.core.logging import setup_logging
from aaprp.db.init_db import init_db
from aaprp.db.session import AsyncSessionLocal

setup_logging()
logger = logging.getLogger(__name__)

SERVICE_NAME = "AAPRP Assessment Engine"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(f"Starting {SERVICE_NAME} (env={settings.env})")

    if settings.init_db_on_startup and settings.is_dev:
        logger.info("Initializing database...")
        async with AsyncSessionLocal() as session:
            await init_db(session)

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")


app = FastAPI(
    title=f"{SERVICE_NAME} API",
    description="Assessment scoring and lifecycle engine for the ANS peer review programme",
    version=__version__,
    docs_url="/docs" if settings.is_dev else None,
    redoc_url="/redoc" if settings.is_dev else None,
    openapi_url="/openapi.json" if settings.is_dev else None,
    lifespan=lifespan,
)

if settings.is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(AssessmentError)
async def assessment_error_handler(request: Request, exc: AssessmentError) -> JSONResponse:
    """Render expected domain failures as structured bodies."""
    logger.info(
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={"request_id": request.headers.get("X-Request-ID")},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    if settings.is_prod:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


app.include_router(api_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict:
    """Service info."""
    return {
        "service": SERVICE_NAME,
        "version": __version__,
        "docs": "/docs" if settings.is_dev else "Disabled in production",
    }
