"""
Managed Query Service

Delegates schema introspection, prompting and SQL generation to the hosted
Mira API. The request is forwarded as-is and the answer is mapped onto the
same QueryOutcome the direct path returns.
"""

import logging
from typing import Any

import httpx

from nlquery.config import ManagedSettings
from nlquery.models.query import QueryOutcome
from nlquery.pipeline.base import QueryService

logger = logging.getLogger(__name__)


class ManagedQueryService(QueryService):
    """
    Query path backed by the Mira HTTP API.

    Usage:
        service = ManagedQueryService(api_key="...", base_url="https://.../api/v1")
        outcome = await service.run(dsn, "list all users", "postgres", "user_123")
        await service.aclose()
    """

    name = "managed"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://mira-gtsn.onrender.com/api/v1",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            api_key: Mira API key, sent as a bearer token
            base_url: Mira API base URL
            timeout: Request timeout in seconds (None = httpx default)
            client: Pre-built client (tests inject one with a mock transport)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        if client is None:
            client = httpx.AsyncClient(timeout=timeout) if timeout else httpx.AsyncClient()
        self.client = client

    @classmethod
    def from_settings(cls, settings: ManagedSettings) -> "ManagedQueryService":
        return cls(api_key=settings.api_key, base_url=settings.base_url, timeout=settings.timeout)

    async def run(
        self,
        connection_string: str,
        nl_query: str,
        db_type: str,
        user_id: str | None = None,
    ) -> QueryOutcome:
        payload = {
            "dbType": db_type,
            "connectionString": connection_string,
            "nlQuery": nl_query,
            "userId": user_id,
        }
        headers = {"Authorization": f"Bearer {self.api_key or ''}"}

        logger.info("Calling Mira API...", extra={"db_type": db_type, "user_id": user_id})
        try:
            response = await self.client.post(
                f"{self.base_url}/query", json=payload, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"Mira API request failed: {e}")
            return QueryOutcome.fail(f"Managed query service unreachable: {e}", "managed")

        body = _json_or_none(response)

        if response.is_success and not (isinstance(body, dict) and body.get("success") is False):
            logger.info("Mira API response: Success")
            data = body.get("data", body) if isinstance(body, dict) else body
            return QueryOutcome.ok(data=data)

        message, code = _extract_error(body, response)
        logger.error(f"Mira error: {message}", extra={"status_code": response.status_code})
        return QueryOutcome.fail(message, "managed", code=code)

    async def aclose(self) -> None:
        await self.client.aclose()


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _extract_error(body: Any, response: httpx.Response) -> tuple[str, str | None]:
    """Pull ``(message, code)`` out of an error body, falling back to the HTTP status."""
    fallback = f"Mira API returned status {response.status_code}"
    if not isinstance(body, dict):
        text = response.text.strip()
        return (f"{fallback}: {text}" if text else fallback), None

    error = body.get("error")
    code = body.get("code")
    if isinstance(error, dict):
        code = error.get("code", code)
        error = error.get("message")
    message = error if isinstance(error, str) and error else fallback
    return message, str(code) if code is not None else None
