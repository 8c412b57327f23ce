"""
Query endpoint.
"""

import logging
from time import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from docs_rag.api.deps import get_query_service_dep
from docs_rag.api.schemas import ErrorResponse, QueryRequest, QueryResponse
from docs_rag.errors import (
    ConfigurationError,
    IndexNotBuiltError,
    InvalidQuestionError,
    ProviderError,
    ProviderTimeoutError,
)
from docs_rag.services.query_service import QueryService

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": detail})


@router.post(
    "/api/query",
    response_model=QueryResponse,
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def query_documentation(
    body: QueryRequest,
    request: Request,
    service: QueryService = Depends(get_query_service_dep),
):
    """
    Answer a documentation question.

    503 means the index has not been built (run ingestion); 502/504 mean the
    provider call failed or timed out.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    start_time = time()

    try:
        answer = await service.query(body.question)
    except InvalidQuestionError as e:
        return _error(400, "Invalid question", str(e))
    except IndexNotBuiltError as e:
        logger.error(f"[{request_id}] Index not built: {e}")
        return _error(503, "Index not built", str(e))
    except ConfigurationError as e:
        logger.error(f"[{request_id}] Configuration error: {e}")
        return _error(503, "Service misconfigured", str(e))
    except ProviderTimeoutError as e:
        logger.error(f"[{request_id}] Provider timeout: {e}")
        return _error(504, "Provider timeout", str(e))
    except ProviderError as e:
        logger.error(f"[{request_id}] Provider error: {e}")
        return _error(502, "Provider error", str(e))

    latency_ms = int((time() - start_time) * 1000)
    logger.info(f"[{request_id}] Answered in {latency_ms}ms")
    return QueryResponse(answer=answer)
