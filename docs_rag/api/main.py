"""
FastAPI application exposing the documentation query service over HTTP.

Usage:
    uvicorn docs_rag.api.main:app --port 8000
"""

import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from docs_rag.api.routes import health, query
from docs_rag.services.query_service import QueryService, get_query_service
from docs_rag.settings import Settings, get_settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    query_service: Optional[QueryService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (default: get_settings() at startup)
        query_service: Query service to use (default: the process-wide one)

    Returns:
        FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("STARTING FASTAPI APPLICATION")
        logger.info("=" * 60)

        app_settings = settings or get_settings()
        log_level = getattr(logging, app_settings.LOG_LEVEL.upper(), logging.INFO)
        logging.getLogger().setLevel(log_level)
        logger.info(f"Logging configured: level={app_settings.LOG_LEVEL}, mode={app_settings.ENV}")

        app.state.settings = app_settings
        # The index is loaded lazily by the first query
        app.state.query_service = query_service or get_query_service()

        yield

        logger.info("Stopping application...")
        app.state.query_service = None
        app.state.settings = None

    app = FastAPI(
        title="Docs RAG API",
        description="API for documentation questions using RAG",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Adds request ID to each request."""
        request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    cors_origins_str = os.getenv("CORS_ORIGINS", "")
    if cors_origins_str:
        cors_origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
    else:
        # Allow all only in development
        env_mode = os.getenv("ENV", "production").lower()
        cors_origins = ["*"] if env_mode == "development" else []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-Request-Id"],
    )

    app.include_router(health.router)
    app.include_router(query.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("docs_rag.api.main:app", host="0.0.0.0", port=8000)
