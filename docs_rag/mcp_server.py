"""
MCP server exposing the documentation query service as the query_docs tool.

Usage:
    python -m docs_rag.mcp_server

Or add to an MCP client configuration:
    {
      "mcpServers": {
        "sdk-docs": {
          "command": "python",
          "args": ["-m", "docs_rag.mcp_server"]
        }
      }
    }

The index must be built first (python scripts/ingest.py).
"""

import logging
import sys
from typing import Annotated, Dict

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from docs_rag.errors import (
    ConfigurationError,
    IndexNotBuiltError,
    InvalidQuestionError,
    ProviderError,
    ProviderTimeoutError,
)
from docs_rag.services.query_service import get_query_service

logger = logging.getLogger(__name__)

TOOL_NAME = "query_docs"

TOOL_DESCRIPTION = (
    "Query the SDK and plugin development documentation. "
    "Uses retrieval-augmented generation: the most relevant documentation "
    "fragments are retrieved and an LLM answers from them. Covers getting "
    "started, core concepts (actions, settings, communication protocol), "
    "development workflow (build, deploy, debug, test), UI components and "
    "property inspectors, code templates, security, advanced topics, API "
    "reference, CLI commands and troubleshooting. "
    "Use this tool whenever you need information about plugin development."
)

mcp = FastMCP("docs-rag")


@mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
async def query_docs(
    question: Annotated[
        str,
        Field(description=(
            "The question to ask about plugin development. Examples: "
            "\"How do I create a basic plugin?\", "
            "\"What's the difference between action and global settings?\""
        )),
    ],
) -> Dict[str, str]:
    """Answer a documentation question; returns {"answer": ...}."""
    service = get_query_service()
    try:
        answer = await service.query(question)
    except InvalidQuestionError as e:
        raise ToolError(f"Invalid \"question\" argument: {e}") from e
    except IndexNotBuiltError as e:
        logger.error(f"Query failed, index not built: {e}")
        raise ToolError(f"Documentation index is not available: {e}") from e
    except ConfigurationError as e:
        logger.error(f"Query failed, configuration error: {e}")
        raise ToolError(f"RAG service is misconfigured: {e}") from e
    except ProviderTimeoutError as e:
        logger.error(f"Query timed out: {e}")
        raise ToolError(f"RAG query timed out, try again later: {e}") from e
    except ProviderError as e:
        logger.error(f"Query failed, provider error: {e}")
        raise ToolError(f"RAG query failed (check network and OPENAI_API_KEY): {e}") from e

    return {"answer": answer}


def main() -> None:
    """Run the server over stdio."""
    load_dotenv()

    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )
    settings = get_query_service().settings
    logging.getLogger().setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    logger.info("Documentation RAG MCP server running")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
