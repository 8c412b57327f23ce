"""
Error types shared by ingestion, querying and the tool surfaces.
"""

import asyncio
from typing import Optional

import openai


class ConfigurationError(ValueError):
    """Missing credential, unreadable document root or similar setup problem."""


class IndexNotBuiltError(ConfigurationError):
    """Persisted index is missing or unreadable; ingestion has to run first."""


class InvalidQuestionError(ValueError):
    """Question is not a non-empty string."""


class ProviderError(RuntimeError):
    """Embedding/LLM provider call failed (network, auth, quota)."""


class ProviderTimeoutError(ProviderError):
    """Provider call did not complete within its timeout."""


class IngestionError(RuntimeError):
    """
    Ingestion run failed.

    Attributes:
        stage: One of "loading", "embedding", "persistence"
        cause: Underlying exception, if any
    """

    STAGES = ("loading", "embedding", "persistence")

    def __init__(self, stage: str, message: str, cause: Optional[BaseException] = None):
        if stage not in self.STAGES:
            raise ValueError(f"Unknown ingestion stage: {stage}")
        self.stage = stage
        self.cause = cause
        super().__init__(f"Ingestion failed during {stage}: {message}")


def translate_provider_error(exc: BaseException) -> BaseException:
    """
    Map a provider client exception to ProviderError.

    Exceptions that are already ours, or that do not come from the
    provider, are returned unchanged.
    """
    if isinstance(exc, (ProviderError, ConfigurationError)):
        return exc
    if isinstance(exc, (openai.APITimeoutError, asyncio.TimeoutError)):
        return ProviderTimeoutError(f"OpenAI request timed out: {exc}")
    if isinstance(exc, openai.AuthenticationError):
        return ProviderError(f"OpenAI rejected the credentials (check OPENAI_API_KEY): {exc}")
    if isinstance(exc, openai.RateLimitError):
        return ProviderError(f"OpenAI rate limit or quota exceeded: {exc}")
    if isinstance(exc, openai.OpenAIError):
        return ProviderError(f"OpenAI request failed: {exc}")
    return exc
