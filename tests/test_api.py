"""
Unit tests for the HTTP API.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from docs_rag.api.main import create_app
from docs_rag.errors import (
    ConfigurationError,
    IndexNotBuiltError,
    InvalidQuestionError,
    ProviderError,
    ProviderTimeoutError,
)
from docs_rag.rag.index_meta import IndexMeta, write_index_meta
from docs_rag.services.query_service import QueryService
from tests._helpers import FakeIndexBackend, FakeLLM


@pytest.fixture
def service(make_settings):
    settings = make_settings(ENV="production")
    return QueryService(settings, backend=FakeIndexBackend(), llm=FakeLLM().as_runnable())


@pytest.fixture
def client(service):
    app = create_app(settings=service.settings, query_service=service)
    with TestClient(app) as test_client:
        yield test_client


def test_health_without_index_is_degraded(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "degraded"
    assert body["query_engine_state"] == "uninitialized"
    assert body["index_version"] is None
    assert "diagnostics" not in body


def test_health_reports_index_version_and_debug_diagnostics(client, service):
    write_index_meta(service.persist_dir, IndexMeta(
        index_version="123-abcdef01",
        docs_hash="h",
        doc_roots=["docs"],
        embedding_model="text-embedding-3-small",
        chunk_size=1500,
        chunk_overlap=300,
        documents_count=1,
        chunks_count=2,
    ))

    response = client.get("/health", headers={"X-Debug": "1"})

    body = response.json()
    assert body["status"] == "ok"
    assert body["index_version"] == "123-abcdef01"
    assert body["diagnostics"]["persist_dir"] == str(service.persist_dir)
    assert "OPENAI_API_KEY" not in response.text
    assert "test-key" not in response.text


def test_query_returns_answer(client, service):
    service.query = AsyncMock(return_value="Use the CLI.")

    response = client.post("/api/query", json={"question": "How do I start?"})

    assert response.status_code == 200
    assert response.json() == {"answer": "Use the CLI."}
    assert response.headers["X-Request-Id"]


def test_query_without_index_is_503(client):
    response = client.post("/api/query", json={"question": "How do I start?"})

    assert response.status_code == 503
    assert response.json()["error"] == "Index not built"


@pytest.mark.parametrize(
    "error, status_code",
    [
        (InvalidQuestionError("Question must not be empty"), 400),
        (IndexNotBuiltError("No index found"), 503),
        (ConfigurationError("OPENAI_API_KEY is not set"), 503),
        (ProviderTimeoutError("timed out"), 504),
        (ProviderError("connection refused"), 502),
    ],
)
def test_query_error_status_codes(client, service, error, status_code):
    service.query = AsyncMock(side_effect=error)

    response = client.post("/api/query", json={"question": "How do I start?"})

    assert response.status_code == status_code
    assert response.json()["detail"] == str(error)


def test_query_rejects_missing_question(client):
    response = client.post("/api/query", json={})

    assert response.status_code == 422
