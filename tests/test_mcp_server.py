"""
Unit tests for the query_docs MCP tool.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from docs_rag import mcp_server
from docs_rag.errors import (
    ConfigurationError,
    IndexNotBuiltError,
    InvalidQuestionError,
    ProviderError,
    ProviderTimeoutError,
)


@pytest.fixture
def fake_service(monkeypatch):
    service = MagicMock()
    service.query = AsyncMock(return_value="Run `streamdeck create`.")
    monkeypatch.setattr(mcp_server, "get_query_service", lambda: service)
    return service


@pytest.mark.asyncio
async def test_tool_is_listed_with_question_schema():
    tools = await mcp_server.mcp.list_tools()

    assert [tool.name for tool in tools] == ["query_docs"]
    tool = tools[0]
    assert "documentation" in tool.description
    assert tool.inputSchema["required"] == ["question"]
    assert tool.inputSchema["properties"]["question"]["type"] == "string"


@pytest.mark.asyncio
async def test_query_docs_returns_answer(fake_service):
    result = await mcp_server.query_docs("How do I create a basic plugin?")

    assert result == {"answer": "Run `streamdeck create`."}
    fake_service.query.assert_awaited_once_with("How do I create a basic plugin?")


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments", [{}, {"question": ["not", "a", "string"]}])
async def test_malformed_arguments_are_rejected(fake_service, arguments):
    with pytest.raises(ToolError):
        await mcp_server.mcp.call_tool("query_docs", arguments)

    fake_service.query.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, message",
    [
        (InvalidQuestionError("Question must not be empty"), "Invalid \"question\" argument"),
        (IndexNotBuiltError("No index found"), "index is not available"),
        (ConfigurationError("OPENAI_API_KEY is not set"), "misconfigured"),
        (ProviderTimeoutError("OpenAI request timed out"), "timed out"),
        (ProviderError("OpenAI request failed"), "RAG query failed"),
    ],
)
async def test_errors_become_tool_errors(fake_service, error, message):
    fake_service.query.side_effect = error

    with pytest.raises(ToolError, match=message) as exc_info:
        await mcp_server.query_docs("anything")

    assert exc_info.value.__cause__ is error
    assert str(error) in str(exc_info.value)
