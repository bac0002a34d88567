"""
FastAPI Application

Main FastAPI application for NLQuery with:
- Lifespan management for query service initialization/cleanup
- CORS middleware for frontend integration
- Validation error handler matching the endpoints' error shape
- Health, debug and query endpoints

Usage:
    uvicorn nlquery.api.main:app --reload --port 3000
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nlquery import __version__
from nlquery.api.dependencies import close_services, get_direct_service, get_managed_service
from nlquery.api.routes import health, query
from nlquery.config import get_settings
from nlquery.models.api import REQUIRED_PARAMETERS, ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for startup and shutdown.

    Initializes the direct and managed query services.
    """
    config = get_settings()
    logger.info(f"Starting {config.app_name} API server...")

    try:
        get_direct_service()
        get_managed_service()
        logger.info(f"{config.app_name} API server started successfully")

        yield  # Application runs here

    finally:
        logger.info(f"Shutting down {config.app_name} API server...")
        await close_services()
        logger.info(f"{config.app_name} API server shut down complete")


app = FastAPI(
    title="NLQuery API",
    description="Natural-language questions answered with SQL against PostgreSQL",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for frontend
config = get_settings()
cors_origins = config.cors_origin_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report invalid or missing body fields as a 400 with the required parameter list."""
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error=f"Missing required parameters: {', '.join(REQUIRED_PARAMETERS)}",
        ).model_dump(exclude_none=True),
    )


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(query.router, tags=["query"])
