"""
Health check endpoint.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header

from docs_rag.api.deps import get_query_service_dep, get_settings_dep
from docs_rag.rag.index_meta import read_index_meta
from docs_rag.services.query_service import QueryService, QueryServiceState
from docs_rag.settings import Settings

router = APIRouter()


@router.get("/health")
async def health_check(
    service: QueryService = Depends(get_query_service_dep),
    settings: Settings = Depends(get_settings_dep),
    x_debug: Optional[str] = Header(None, alias="X-Debug"),
):
    """
    Health check endpoint for monitoring.

    Does not load the index; reports whether one has been persisted and
    whether the query engine is already loaded. Includes diagnostics if
    ENV != "production" or X-Debug: 1 header is present.
    """
    meta = read_index_meta(service.persist_dir)
    index_built = meta is not None or service.state == QueryServiceState.READY

    response = {
        "status": "ok" if index_built else "degraded",
        "query_engine_state": service.state.value,
        "index_version": meta.index_version if meta else service.index_version,
    }

    if settings.ENV != "production" or x_debug == "1":
        # OPENAI_API_KEY is never included
        response["diagnostics"] = {
            "env": settings.ENV,
            "log_level": settings.LOG_LEVEL,
            "persist_dir": str(service.persist_dir),
            "doc_roots": settings.get_doc_roots(),
            "top_k": service.top_k,
            "llm_model": settings.OPENAI_LLM_MODEL,
            "embedding_model": settings.OPENAI_EMBEDDING_MODEL,
            "index": meta.to_dict() if meta else None,
        }

    return response
