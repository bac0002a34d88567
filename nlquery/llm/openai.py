"""
OpenAI-Compatible LLM Provider

Implementation of BaseLLMProvider on top of the official openai SDK.
Works with any endpoint that speaks the chat-completions protocol
(xAI Grok by default, OpenAI, vLLM, ...).
"""

import logging

import openai
from openai import AsyncOpenAI

from nlquery.llm.base import BaseLLMProvider, LLMProviderError, format_error_body
from nlquery.llm.models import LLMRequest, LLMResponse, LLMUsage

logger = logging.getLogger(__name__)


def mask_api_key(api_key: str | None) -> str:
    """Show only the first characters of a key, for logs."""
    if not api_key:
        return "NOT SET"
    return f"{api_key[:10]}..."


class OpenAIProvider(BaseLLMProvider):
    """
    Chat-completion provider using the openai SDK's async client.

    The client is built with ``max_retries=0``: a failed call is reported
    once and never replayed. When no timeout is given, the SDK's own default
    applies.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "grok-2-1212",
        base_url: str | None = "https://api.x.ai/v1",
        temperature: float = 0.1,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize provider.

        Args:
            api_key: Bearer token for the endpoint
            model: Default model to use
            base_url: OpenAI-compatible base URL (None = api.openai.com)
            temperature: Default temperature
            max_tokens: Default max tokens (None = endpoint default)
            timeout: Request timeout in seconds (None = SDK default)
        """
        super().__init__(
            provider_name="openai",
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )

        self.model = model
        self.base_url = base_url
        self.api_key = api_key

        client_kwargs = {"api_key": api_key or "", "max_retries": 0}
        if base_url:
            client_kwargs["base_url"] = base_url
        if timeout is not None:
            client_kwargs["timeout"] = float(timeout)
        self.client = AsyncOpenAI(**client_kwargs)

        logger.info(
            f"OpenAI-compatible provider initialized with model: {model}",
            extra={"model": model, "base_url": base_url},
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion using the chat-completions endpoint.

        Args:
            request: LLM request

        Returns:
            LLMResponse with the first choice's content

        Raises:
            LLMProviderError: On missing credentials, API errors, transport
                errors or a response without usable content
        """
        if not self.api_key:
            raise LLMProviderError("API key is not set")

        request = self._apply_defaults(request)
        self._log_request(request)
        logger.debug(f"Calling {self.base_url} with API key {mask_api_key(self.api_key)}")

        params = {}
        if request.max_tokens is not None:
            params["max_tokens"] = request.max_tokens

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": msg.role, "content": msg.content} for msg in request.messages],
                temperature=request.temperature,
                **params,
            )
        except openai.APIStatusError as e:
            logger.error(
                f"Completion API error: status={e.status_code} body={format_error_body(e.body)}"
            )
            raise LLMProviderError(e.message, status_code=e.status_code, body=e.body) from e
        except openai.APIError as e:
            logger.error(f"Completion API request failed: {e.message}")
            raise LLMProviderError(e.message) from e

        if not response.choices:
            raise LLMProviderError("Malformed completion response: no choices returned")

        choice = response.choices[0]
        content = choice.message.content if choice.message else None
        if content is None:
            raise LLMProviderError("Malformed completion response: first choice has no content")

        usage = LLMUsage()
        if response.usage is not None:
            usage = LLMUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )

        llm_response = LLMResponse(
            content=content,
            model=response.model or self.model,
            usage=usage,
            finish_reason=self._map_finish_reason(choice.finish_reason),
            provider=self.provider_name,
        )

        self._log_response(llm_response)
        return llm_response

    async def aclose(self) -> None:
        await self.client.close()

    def _map_finish_reason(self, reason: str | None) -> str:
        """Map finish reason to our standard format."""
        if reason in ("stop", "length", "content_filter"):
            return reason
        return "stop"
