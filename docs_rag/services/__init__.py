"""
Services layer for business logic.
"""

from docs_rag.services.query_service import (
    QueryService,
    QueryServiceState,
    get_query_service,
    query,
)

__all__ = ["QueryService", "QueryServiceState", "get_query_service", "query"]
