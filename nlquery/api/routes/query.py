"""
Query Routes

POST /query         natural-language query through the managed Mira API
POST /query-direct  natural-language query through the in-process pipeline
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from nlquery.api.dependencies import get_direct_service, get_managed_service
from nlquery.models.api import ErrorResponse, QueryRequest, QuerySuccessResponse
from nlquery.pipeline.base import QueryService
from nlquery.pipeline.direct import SUPPORTED_DB_TYPES, UNSUPPORTED_DB_TYPE_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def encode_bytea(value: bytes) -> str:
    """Render binary values the way PostgreSQL prints bytea: \\x followed by hex."""
    return "\\x" + value.hex()


def encode_rows(data: Any) -> Any:
    """Make result rows JSON-safe (bytea, numeric, timestamps, uuid, ...)."""
    return jsonable_encoder(data, custom_encoder={bytes: encode_bytea})


def _error(status_code: int, error: str, **extra) -> JSONResponse:
    content = ErrorResponse(error=error, **extra).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=content)


def _internal_error(exc: Exception) -> JSONResponse:
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        details=str(exc) or "Unknown error",
    )


@router.post(
    "/query",
    response_model=QuerySuccessResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def query(
    request: QueryRequest,
    service: QueryService = Depends(get_managed_service),
):
    """Answer a question through the managed Mira API."""
    logger.info(
        "Received query request",
        extra={"db_type": request.db_type, "nl_query": request.nl_query, "user_id": request.user_id},
    )
    try:
        outcome = await service.run(
            request.connection_string, request.nl_query, request.db_type, request.user_id
        )
        if outcome.success:
            return QuerySuccessResponse(data=encode_rows(outcome.data))
    except Exception as e:
        logger.exception(f"Error in /query: {e}")
        return _internal_error(e)

    return _error(status.HTTP_400_BAD_REQUEST, outcome.error, code=outcome.code)


@router.post("/query-direct", response_model=QuerySuccessResponse, responses=_ERROR_RESPONSES)
async def query_direct(
    request: QueryRequest,
    service: QueryService = Depends(get_direct_service),
):
    """Answer a question in-process against PostgreSQL (bypasses the Mira API)."""
    logger.info(
        "Received direct query request",
        extra={"db_type": request.db_type, "nl_query": request.nl_query, "user_id": request.user_id},
    )

    if request.db_type not in SUPPORTED_DB_TYPES:
        return _error(status.HTTP_400_BAD_REQUEST, UNSUPPORTED_DB_TYPE_MESSAGE)

    try:
        outcome = await service.run(
            request.connection_string, request.nl_query, request.db_type, request.user_id
        )
        if outcome.success:
            return QuerySuccessResponse(data=encode_rows(outcome.data), sql=outcome.sql)
    except Exception as e:
        logger.exception(f"Error in /query-direct: {e}")
        return _internal_error(e)

    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, outcome.error)
