"""
Query pipeline package.

Contains the two query paths behind the QueryService interface: the direct
in-process PostgreSQL path and the managed Mira API path.
"""

from nlquery.pipeline.base import QueryService
from nlquery.pipeline.direct import DirectQueryService, execute_direct_query
from nlquery.pipeline.managed import ManagedQueryService
from nlquery.pipeline.sql_generator import GenerationError, SQLGenerator, sanitize_sql

__all__ = [
    "QueryService",
    "DirectQueryService",
    "ManagedQueryService",
    "SQLGenerator",
    "GenerationError",
    "execute_direct_query",
    "sanitize_sql",
]
