"""
Unit tests for settings parsing.
"""

import pytest

from docs_rag.settings import Settings

ENV_VARS = [
    "OPENAI_API_KEY",
    "PERSIST_DIR",
    "DOC_ROOTS",
    "DOC_EXTENSIONS",
    "EXCLUDED_DIRS",
    "TOP_K",
    "OPENAI_MAX_RETRIES",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    """Test default values mirror the documented configuration."""
    settings = Settings()

    assert settings.OPENAI_API_KEY is None
    assert settings.PERSIST_DIR == "storage"
    assert settings.TOP_K == 5
    assert settings.OPENAI_MAX_RETRIES == 0
    assert settings.get_doc_roots() == ["doc-site/docs", "."]
    assert settings.get_doc_extensions() == frozenset({".md"})
    assert settings.get_excluded_dirs() == frozenset({"node_modules", ".git", "dist", "build", ".vscode"})


def test_values_from_environment(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-env")
    clean_env.setenv("DOC_ROOTS", " docs , ,guides/api ")
    clean_env.setenv("DOC_EXTENSIONS", "MD,.mdx")
    clean_env.setenv("PERSIST_DIR", "/var/lib/docs-index")

    settings = Settings()

    assert settings.OPENAI_API_KEY == "sk-env"
    assert settings.get_doc_roots() == ["docs", "guides/api"]
    assert settings.get_doc_extensions() == frozenset({".md", ".mdx"})
    assert settings.PERSIST_DIR == "/var/lib/docs-index"


def test_values_are_clamped(clean_env):
    settings = Settings(TOP_K=100, OPENAI_TEMPERATURE=3.5, OPENAI_MAX_RETRIES=-2, OPENAI_TIMEOUT=0)

    assert settings.TOP_K == 20
    assert settings.OPENAI_TEMPERATURE == 1.0
    assert settings.OPENAI_MAX_RETRIES == 0
    assert settings.OPENAI_TIMEOUT == 1

    assert Settings(TOP_K=0).TOP_K == 1
