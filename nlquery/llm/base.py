"""
Base LLM Provider

Abstract base class defining the interface for chat-completion providers,
plus the single error type providers raise.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from nlquery.llm.models import LLMRequest, LLMResponse

logger = logging.getLogger(__name__)


class LLMProviderError(Exception):
    """
    Failure talking to a completion endpoint.

    Covers transport errors, non-2xx responses and malformed bodies.
    ``status_code`` and ``body`` are set when the endpoint answered.
    """

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body

    @property
    def detail(self) -> str:
        """Message with upstream status and body when available."""
        if self.status_code is None:
            return self.message
        body = format_error_body(self.body)
        if body:
            return f"upstream status {self.status_code}: {body}"
        return f"upstream status {self.status_code}: {self.message}"

    def __str__(self) -> str:
        return self.detail


def format_error_body(body: Any) -> str:
    """Render an upstream error body as a short string."""
    if body is None:
        return ""
    if isinstance(body, str):
        return body
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, str):
            return error
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    try:
        return json.dumps(body, default=str)
    except (TypeError, ValueError):
        return str(body)


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Attributes:
        provider_name: Unique identifier for this provider
        temperature: Default sampling temperature
        max_tokens: Default maximum tokens to generate (None = endpoint default)
        timeout: Request timeout in seconds (None = client library default)
    """

    def __init__(
        self,
        provider_name: str,
        temperature: float = 0.0,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ):
        self.provider_name = provider_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

        logger.info(
            f"Initialized {provider_name} provider",
            extra={
                "provider": provider_name,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )

    @abstractmethod
    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate a completion from the LLM.

        Args:
            request: LLM request with messages and parameters

        Returns:
            LLMResponse with the first choice's content

        Raises:
            LLMProviderError: On transport errors, non-2xx responses or
                malformed response bodies
        """
        pass  # pragma: no cover - abstract method

    async def aclose(self) -> None:
        """Close underlying HTTP clients."""
        return None

    def _apply_defaults(self, request: LLMRequest) -> LLMRequest:
        """Apply default values to request if not specified."""
        if request.temperature is None:
            request.temperature = self.temperature
        if request.max_tokens is None:
            request.max_tokens = self.max_tokens
        return request

    def _log_request(self, request: LLMRequest) -> None:
        """Log request details for debugging."""
        logger.debug(
            f"{self.provider_name} request",
            extra={
                "provider": self.provider_name,
                "message_count": len(request.messages),
                "temperature": request.temperature,
                "max_tokens": request.max_tokens,
            },
        )

    def _log_response(self, response: LLMResponse) -> None:
        """Log response details for debugging."""
        logger.debug(
            f"{self.provider_name} response",
            extra={
                "provider": self.provider_name,
                "model": response.model,
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
                "finish_reason": response.finish_reason,
            },
        )
