"""
FastAPI dependency injection for services and settings.
"""

from fastapi import Request

from docs_rag.services.query_service import QueryService
from docs_rag.settings import Settings


def get_settings_dep(request: Request) -> Settings:
    """Get settings from app.state."""
    return request.app.state.settings


def get_query_service_dep(request: Request) -> QueryService:
    """
    Get query service from app.state.

    Args:
        request: FastAPI request

    Returns:
        QueryService instance
    """
    return request.app.state.query_service
