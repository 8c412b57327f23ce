"""
Utilities for working with OpenAI API.

Provider configuration is an explicit object handed to the index builder and
the query service; nothing here mutates process-wide model handles.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from docs_rag.errors import ConfigurationError
from docs_rag.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderConfig:
    """Credentials, models and limits for the embedding/LLM provider."""

    api_key: Optional[str]
    embedding_model: str = "text-embedding-3-small"
    llm_model: str = "gpt-4o-mini"
    temperature: float = 0.0
    timeout: int = 30
    llm_timeout: int = 120
    batch_timeout: int = 300
    max_retries: int = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            embedding_model=settings.OPENAI_EMBEDDING_MODEL,
            llm_model=settings.OPENAI_LLM_MODEL,
            temperature=settings.OPENAI_TEMPERATURE,
            timeout=settings.OPENAI_TIMEOUT,
            llm_timeout=settings.OPENAI_LLM_TIMEOUT,
            batch_timeout=settings.OPENAI_BATCH_TIMEOUT,
            max_retries=settings.OPENAI_MAX_RETRIES,
        )

    def require_api_key(self) -> str:
        """
        Return the API key or fail before any provider call is attempted.

        Raises:
            ConfigurationError: If OPENAI_API_KEY is not configured
        """
        if not self.api_key or not self.api_key.strip():
            logger.error("OPENAI_API_KEY not found in environment variables")
            raise ConfigurationError(
                "OPENAI_API_KEY is not set. "
                "Export it or create .env file with OPENAI_API_KEY=your-key"
            )
        return self.api_key

    def __repr__(self) -> str:
        masked = "***" if self.api_key else None
        return (
            f"ProviderConfig(api_key={masked!r}, embedding_model={self.embedding_model!r}, "
            f"llm_model={self.llm_model!r}, timeout={self.timeout}, max_retries={self.max_retries})"
        )


def get_embeddings_client(provider: ProviderConfig, timeout: Optional[int] = None) -> OpenAIEmbeddings:
    """
    Creates client for OpenAI embeddings with timeout settings.

    Args:
        provider: Provider configuration
        timeout: Timeout in seconds. If not specified, provider.timeout is used.
                 For index builds pass provider.batch_timeout.

    Returns:
        OpenAIEmbeddings client
    """
    api_key = provider.require_api_key()

    if timeout is None:
        timeout = provider.timeout

    return OpenAIEmbeddings(
        model=provider.embedding_model,
        api_key=api_key,
        timeout=timeout,
        max_retries=provider.max_retries,
    )


def get_chat_llm(
    provider: ProviderConfig,
    max_tokens: Optional[int] = None,
    timeout: Optional[int] = None
) -> ChatOpenAI:
    """
    Creates client for OpenAI Chat API with timeout settings.

    Args:
        provider: Provider configuration (model, temperature, retries)
        max_tokens: Maximum number of tokens (optional)
        timeout: Timeout in seconds. If not specified, provider.llm_timeout is used.

    Returns:
        ChatOpenAI client
    """
    api_key = provider.require_api_key()

    if timeout is None:
        timeout = provider.llm_timeout

    kwargs = {
        "model": provider.llm_model,
        "temperature": provider.temperature,
        "api_key": api_key,
        "timeout": timeout,
        "max_retries": provider.max_retries,
    }

    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens

    return ChatOpenAI(**kwargs)
