"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.adapters.storage import build_store
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.exceptions import InfrastructureError

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "OTP Registration API v1 - Register users and manage them as admin",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Configures logging from settings
    - Builds the store selected by settings (once per process)
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Starting application (environment: %s)...", settings.environment)

    # Tests may install a store before startup
    if getattr(app.state, "store", None) is None:
        app.state.store = build_store(settings)

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")


app = FastAPI(
    title="otp-registration",
    description="User registration with email OTP verification and an admin surface",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Original client paths at the root, versioned alias under /v1
app.include_router(v1_router)
app.include_router(v1_router, prefix="/v1", include_in_schema=False)


@app.get("/health")
async def health_check(request: Request) -> JSONResponse:
    """
    Health check endpoint with storage validation.

    Returns 200 OK if application and store are healthy, 503 otherwise.
    """
    store = request.app.state.store
    try:
        store.ping()
    except InfrastructureError:
        logger.exception("Health check failed")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "storage": type(store).__name__},
        )

    return JSONResponse(content={"status": "healthy", "storage": type(store).__name__})
