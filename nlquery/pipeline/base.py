"""
Query service interface.

Both query paths (in-process direct and the managed Mira API) answer a
natural-language question with the same QueryOutcome, so the HTTP layer
and the CLI can use either interchangeably.
"""

from abc import ABC, abstractmethod

from nlquery.models.query import QueryOutcome


class QueryService(ABC):
    """Answers a natural-language question against a target database."""

    name: str = "base"

    @abstractmethod
    async def run(
        self,
        connection_string: str,
        nl_query: str,
        db_type: str,
        user_id: str | None = None,
    ) -> QueryOutcome:
        """
        Answer ``nl_query`` against the database at ``connection_string``.

        Implementations never raise for query failures; every failure is
        reported as ``QueryOutcome.fail``.
        """
        pass  # pragma: no cover - abstract method

    async def aclose(self) -> None:
        """Release long-lived clients held by the service."""
        return None
