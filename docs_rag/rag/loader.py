"""
Document loading: discovers Markdown files under one or more root directories.
"""

import hashlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from langchain_community.document_loaders import TextLoader
from langchain_core.documents import Document

from docs_rag.errors import ConfigurationError
from docs_rag.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = frozenset({".md"})
DEFAULT_EXCLUDED_DIRS = frozenset({"node_modules", ".git", "dist", "build", ".vscode"})

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class LoaderConfig:
    """Which files the loader picks up and which directories it never enters."""

    extensions: frozenset = field(default=DEFAULT_EXTENSIONS)
    excluded_dirs: frozenset = field(default=DEFAULT_EXCLUDED_DIRS)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LoaderConfig":
        return cls(
            extensions=settings.get_doc_extensions(),
            excluded_dirs=settings.get_excluded_dirs(),
        )

    def matches(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions


def _resolve_root(root_dir: PathLike) -> Path:
    """
    Resolve a root directory and check it can be walked.

    Raises:
        ConfigurationError: If the root is missing, not a directory or unreadable
    """
    root = Path(root_dir).expanduser().resolve()
    if not root.exists():
        raise ConfigurationError(f"Document root {root} does not exist")
    if not root.is_dir():
        raise ConfigurationError(f"Document root {root} is not a directory")
    try:
        with os.scandir(root) as entries:
            next(entries, None)
    except OSError as e:
        raise ConfigurationError(f"Document root {root} is not readable: {e}") from e
    return root


def _read_document(file_path: Path, root: Path) -> Optional[Document]:
    """Load one file as a Document; returns None if it can't be read."""
    try:
        loaded = TextLoader(str(file_path), encoding="utf-8").load()
    except Exception as e:
        logger.error(f"Error loading {file_path}: {e}")
        return None

    identifier = str(file_path)
    try:
        source = file_path.relative_to(root).as_posix()
    except ValueError:
        # Symlinked in from outside the root
        source = file_path.name
    text = "".join(doc.page_content for doc in loaded)
    return Document(
        id=identifier,
        page_content=text,
        metadata={
            "file_path": identifier,
            "source": source,
            "filename": file_path.name,
        },
    )


def _walk_root(
    root: Path,
    config: LoaderConfig,
    processed_roots: Set[Path],
    seen_ids: Set[str],
) -> List[Document]:
    documents = []

    def on_walk_error(error: OSError) -> None:
        logger.error(f"Skipping unreadable directory {error.filename}: {error}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_walk_error):
        current = Path(dirpath)
        # Prune in place so os.walk never descends into these
        dirnames[:] = sorted(
            name for name in dirnames
            if name not in config.excluded_dirs
            and (current / name).resolve() not in processed_roots
        )

        for filename in sorted(filenames):
            file_path = current / filename
            if not config.matches(file_path):
                continue
            resolved = file_path.resolve()
            if str(resolved) in seen_ids:
                logger.debug(f"Already loaded from a more specific root: {resolved}")
                continue

            doc = _read_document(resolved, root)
            if doc is None:
                continue

            seen_ids.add(doc.id)
            documents.append(doc)
            logger.debug(f"Loaded: {doc.metadata['source']}")

    return documents


def load_documents(
    root_dirs: Iterable[PathLike],
    config: Optional[LoaderConfig] = None,
) -> List[Document]:
    """
    Loads every matching file under the given root directories.

    Roots are walked most-specific first. When one root is nested inside
    another, the broader walk skips the nested root entirely, so each file
    appears once and keeps the metadata of the narrower root.

    Args:
        root_dirs: Directories to walk
        config: Extension filter and excluded directory names

    Returns:
        Documents with unique ids (resolved file paths); order is not guaranteed

    Raises:
        ConfigurationError: If any root is missing or unreadable
    """
    if config is None:
        config = LoaderConfig()

    roots: List[Path] = []
    for root_dir in root_dirs:
        root = _resolve_root(root_dir)
        if root not in roots:
            roots.append(root)

    if not roots:
        raise ConfigurationError("No document roots configured")

    # Deeper paths first; sort is stable so equal depths keep caller order
    roots.sort(key=lambda p: len(p.parts), reverse=True)

    documents: List[Document] = []
    seen_ids: Set[str] = set()
    processed_roots: Set[Path] = set()

    for root in roots:
        logger.info(f"Loading documents from {root}...")
        root_docs = _walk_root(root, config, processed_roots, seen_ids)
        logger.info(f"Loaded {len(root_docs)} documents from {root}")
        documents.extend(root_docs)
        processed_roots.add(root)

    logger.info(f"Total documents loaded: {len(documents)}")
    return documents


def compute_docs_hash(documents: List[Document]) -> str:
    """
    Computes a deterministic hash over document ids and contents.

    Args:
        documents: Loaded documents

    Returns:
        SHA256 hex digest
    """
    hasher = hashlib.sha256()
    for doc in sorted(documents, key=lambda d: d.id or ""):
        hasher.update((doc.id or "").encode("utf-8"))
        hasher.update(b"\0")
        hasher.update(doc.page_content.encode("utf-8"))
        hasher.update(b"\0")
    return hasher.hexdigest()
