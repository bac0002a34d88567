"""
LLM Provider Module

Chat-completion abstraction used for SQL generation.

Usage:
    from nlquery.llm import LLMMessage, LLMRequest, OpenAIProvider

    provider = OpenAIProvider(api_key="xai-...", model="grok-2-1212")
    response = await provider.generate(
        LLMRequest(messages=[LLMMessage(role="user", content="Hello!")])
    )
    print(response.content)
"""

from nlquery.llm.base import BaseLLMProvider, LLMProviderError
from nlquery.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMUsage
from nlquery.llm.openai import OpenAIProvider

__all__ = [
    "BaseLLMProvider",
    "LLMProviderError",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
    "OpenAIProvider",
]
