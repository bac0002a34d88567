"""
Query outcome model.

The tagged result shared by every query path (direct and managed).
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

ErrorType = Literal[
    "connection", "schema", "generation", "execution", "managed", "unsupported", "unknown"
]

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


class QueryOutcome(BaseModel):
    """
    Result of answering one natural-language query.

    Either success (rows, plus the SQL that produced them when known) or
    failure (a human-readable message). Build instances with ``ok()`` or
    ``fail()``.
    """

    success: bool = Field(..., description="Whether the query produced rows")
    data: Any = Field(None, description="Result rows on success")
    sql: str | None = Field(None, description="SQL that produced the rows")
    error: str | None = Field(None, description="Error message on failure")
    error_type: ErrorType | None = Field(None, description="Failure category")
    code: str | None = Field(None, description="Upstream error code (managed path)")

    @classmethod
    def ok(cls, data: Any, sql: str | None = None) -> "QueryOutcome":
        return cls(success=True, data=data, sql=sql)

    @classmethod
    def fail(
        cls,
        error: str | None,
        error_type: ErrorType = "unknown",
        code: str | None = None,
    ) -> "QueryOutcome":
        return cls(
            success=False,
            error=error or UNKNOWN_ERROR_MESSAGE,
            error_type=error_type,
            code=code,
        )
