"""
Service dependencies for the API routes.

Query services are created once per process (in the app lifespan, or on
first use) and shared. They hold only HTTP client infrastructure; every
request still opens and closes its own database connection.
"""

import logging

from nlquery.config import get_settings
from nlquery.pipeline.base import QueryService
from nlquery.pipeline.direct import DirectQueryService
from nlquery.pipeline.managed import ManagedQueryService

logger = logging.getLogger(__name__)

app_state: dict[str, QueryService | None] = {
    "direct_service": None,
    "managed_service": None,
}


def get_direct_service() -> QueryService:
    """Direct (in-process PostgreSQL) query service."""
    if app_state["direct_service"] is None:
        logger.info("Initializing direct query service...")
        app_state["direct_service"] = DirectQueryService.from_settings(get_settings())
    return app_state["direct_service"]


def get_managed_service() -> QueryService:
    """Managed (Mira API) query service."""
    if app_state["managed_service"] is None:
        logger.info("Initializing managed query service...")
        app_state["managed_service"] = ManagedQueryService.from_settings(get_settings().managed)
    return app_state["managed_service"]


async def close_services() -> None:
    """Close all initialized services."""
    for key, service in app_state.items():
        if service is None:
            continue
        try:
            await service.aclose()
            logger.info(f"Closed {service.name} query service")
        except Exception as e:
            logger.error(f"Error closing {key}: {e}")
        app_state[key] = None
