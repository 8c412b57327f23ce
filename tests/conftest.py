"""
Pytest configuration.

Ensures repo root is on sys.path so `import docs_rag...` works reliably
when running pytest from repo root without installing the package.
"""

import sys
from pathlib import Path

import pytest

# __file__ is tests/conftest.py, so parents[1] is the repo root
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from docs_rag.settings import Settings
from tests._helpers import write_files


@pytest.fixture
def docs_tree(tmp_path) -> Path:
    """A small documentation project with a nested doc-site root."""
    root = tmp_path / "project"
    write_files(root, {
        "README.md": "# Project\n\n" + "Overview of the plugin SDK documentation project. " * 10,
        "doc-site/docs/getting-started.md": "# Getting started\n\n" + "Install the CLI and scaffold a plugin. " * 10,
        "doc-site/docs/api/actions.md": "# Actions\n\n## keyDown\n\n" + "The keyDown event fires when a key is pressed. " * 10,
        "node_modules/lib/README.md": "# Vendored\n\nShould never be indexed.",
        "notes.txt": "Not markdown.",
    })
    return root


@pytest.fixture
def make_settings(tmp_path):
    """Factory for Settings pointing at temporary directories."""

    def _make(**overrides) -> Settings:
        values = {
            "OPENAI_API_KEY": "test-key",
            "PERSIST_DIR": str(tmp_path / "storage"),
            "DOC_ROOTS": str(tmp_path / "project"),
            "INDEX_LOCK_TIMEOUT_SECONDS": 5,
        }
        values.update(overrides)
        return Settings(**values)

    return _make
