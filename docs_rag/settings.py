"""
Centralized application settings using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
"""

import logging
import os
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Centralized application settings."""

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE"),  # Only load .env if ENV_FILE is explicitly set
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    ENV: Literal["development", "production"] = Field(default="production", description="Environment mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # OpenAI
    OPENAI_API_KEY: Optional[str] = Field(
        default=None,
        description="OpenAI API key (required for ingestion and queries, checked at use time)"
    )
    OPENAI_EMBEDDING_MODEL: str = Field(default="text-embedding-3-small", description="Embedding model")
    OPENAI_LLM_MODEL: str = Field(default="gpt-4o-mini", description="Chat model used to answer questions")
    OPENAI_TEMPERATURE: float = Field(default=0.0, description="LLM temperature")
    OPENAI_TIMEOUT: int = Field(default=30, description="OpenAI API timeout in seconds")
    OPENAI_LLM_TIMEOUT: int = Field(default=120, description="OpenAI LLM timeout in seconds")
    OPENAI_BATCH_TIMEOUT: int = Field(default=300, description="OpenAI batch operations timeout in seconds")
    OPENAI_MAX_RETRIES: int = Field(default=0, description="OpenAI client retries (0 = fail on first error)")

    # Vector index
    PERSIST_DIR: str = Field(default="storage", description="Directory for the persisted FAISS index")

    # Document discovery
    DOC_ROOTS: str = Field(
        default="doc-site/docs,.",
        description="Comma-separated list of documentation root directories"
    )
    DOC_EXTENSIONS: str = Field(default=".md", description="Comma-separated list of included file extensions")
    EXCLUDED_DIRS: str = Field(
        default="node_modules,.git,dist,build,.vscode",
        description="Comma-separated list of directory names skipped while walking roots"
    )

    # Chunking
    CHUNK_SIZE: int = Field(default=1500, description="Document chunk size")
    CHUNK_OVERLAP: int = Field(default=300, description="Document chunk overlap")
    MIN_CHUNK_SIZE: int = Field(default=200, description="Minimum chunk size")

    # Retrieval
    TOP_K: int = Field(default=5, description="Number of chunks retrieved per question")

    # Index management
    INDEX_LOCK_TIMEOUT_SECONDS: int = Field(
        default=300,
        description="Index lock timeout in seconds"
    )

    @field_validator("OPENAI_TEMPERATURE")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate temperature is in valid range."""
        return max(0.0, min(1.0, v))

    @field_validator("TOP_K")
    @classmethod
    def validate_top_k(cls, v: int) -> int:
        """Validate top K is in valid range."""
        return max(1, min(20, v))

    @field_validator("OPENAI_TIMEOUT", "OPENAI_LLM_TIMEOUT", "OPENAI_BATCH_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        return max(1, v)

    @field_validator("OPENAI_MAX_RETRIES")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        """Validate retries is non-negative."""
        return max(0, v)

    @field_validator("CHUNK_SIZE", "CHUNK_OVERLAP", "MIN_CHUNK_SIZE")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """Validate chunk size is positive."""
        return max(1, v)

    @field_validator("INDEX_LOCK_TIMEOUT_SECONDS")
    @classmethod
    def validate_lock_timeout(cls, v: int) -> int:
        """Validate lock timeout is positive."""
        return max(1, v)

    def get_doc_roots(self) -> List[str]:
        """Get list of documentation root directories."""
        return _split_csv(self.DOC_ROOTS)

    def get_doc_extensions(self) -> frozenset:
        """
        Get set of included extensions (lowercase, with leading dot).

        Returns:
            Frozen set such as {".md"}
        """
        extensions = set()
        for ext in _split_csv(self.DOC_EXTENSIONS):
            ext = ext.lower()
            extensions.add(ext if ext.startswith(".") else f".{ext}")
        return frozenset(extensions)

    def get_excluded_dirs(self) -> frozenset:
        """Get set of excluded directory names."""
        return frozenset(_split_csv(self.EXCLUDED_DIRS))


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance
    """
    try:
        settings = Settings()
        logger.info("Settings loaded successfully")
        return settings
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        raise
