"""
Health and Debug Routes

Service banner, liveness check, and a masked configuration summary.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, status

from nlquery import __version__
from nlquery.config import get_settings
from nlquery.models.api import DebugResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def mask_secret(value: str | None) -> str:
    """Show only the last four characters of a secret."""
    if not value:
        return "NOT SET"
    return f"***{value[-4:]}"


@router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": f"{get_settings().app_name} API",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
    }


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """
    Basic liveness check.

    Returns 200 OK if the service is running. Does not touch any database.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/debug", response_model=DebugResponse)
async def debug() -> DebugResponse:
    """Configuration summary. Secrets are masked."""
    settings = get_settings()
    return DebugResponse(
        message=f"{settings.app_name} Debug Info",
        mira_api_key=mask_secret(settings.managed.api_key),
        mira_base_url=settings.managed.base_url,
        llm_base_url=settings.llm.base_url,
        llm_model=settings.llm.model,
        backend_port=settings.api_port,
    )
