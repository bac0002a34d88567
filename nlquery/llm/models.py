"""
Completion Models

What the SQL generator sends to a chat-completion provider and what it gets
back. Only the fields the generator and the provider logs read are modelled.
"""

from typing import Literal

from pydantic import BaseModel, Field


class LLMMessage(BaseModel):
    """One chat turn: the SQL-expert system line or the schema prompt."""

    role: Literal["system", "user", "assistant"]
    content: str = Field(..., min_length=1)


class LLMRequest(BaseModel):
    """
    A single completion call.

    ``temperature`` and ``max_tokens`` left as None take the provider's
    defaults.
    """

    messages: list[LLMMessage] = Field(..., min_length=1)
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(None, gt=0)


class LLMUsage(BaseModel):
    prompt_tokens: int = Field(0, ge=0)
    completion_tokens: int = Field(0, ge=0)
    total_tokens: int = Field(0, ge=0)


class LLMResponse(BaseModel):
    """Text of the first choice plus what is logged about the call."""

    content: str
    model: str
    provider: str
    usage: LLMUsage = Field(default_factory=LLMUsage)
    finish_reason: Literal["stop", "length", "content_filter"] = "stop"
