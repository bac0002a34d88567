"""
NLQuery Models Module

    Query Models:
        - QueryOutcome: Tagged success/failure result of a query path

    API Models:
        - QueryRequest: Body of /query and /query-direct
        - QuerySuccessResponse / ErrorResponse: Endpoint responses
        - HealthResponse, DebugResponse
"""

from nlquery.models.api import (
    DebugResponse,
    ErrorResponse,
    HealthResponse,
    QueryRequest,
    QuerySuccessResponse,
)
from nlquery.models.query import QueryOutcome

__all__ = [
    "QueryOutcome",
    "QueryRequest",
    "QuerySuccessResponse",
    "ErrorResponse",
    "HealthResponse",
    "DebugResponse",
]
