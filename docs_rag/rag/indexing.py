"""
Indexing module: the ingestion pipeline that builds and persists the vector index.
"""

import asyncio
import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from langchain_core.documents import Document

from docs_rag.errors import ConfigurationError, IngestionError, ProviderError
from docs_rag.infra.openai_utils import ProviderConfig
from docs_rag.rag.backend import FaissIndexBackend, IndexBackend
from docs_rag.rag.chunking import chunk_documents
from docs_rag.rag.index_lock import IndexLock
from docs_rag.rag.index_meta import IndexMeta, generate_index_version, write_index_meta
from docs_rag.rag.loader import LoaderConfig, compute_docs_hash, load_documents
from docs_rag.settings import Settings

logger = logging.getLogger(__name__)

DocumentLoader = Callable[[Iterable[str], LoaderConfig], List[Document]]


@dataclass(frozen=True)
class IngestResult:
    """Outcome of a successful ingestion run."""

    index_version: str
    persist_dir: Path
    documents_count: int
    chunks_count: int


def _remove_tree(path: Path) -> None:
    if path.exists():
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.warning(f"Failed to remove {path}: {e}")


class IndexBuilder:
    """
    One-shot batch pipeline: load documents, build the index, persist it.

    The index is written to a temporary sibling directory and swapped into
    the persistence directory only after the whole build succeeded, so a
    failed run never leaves a half-written index where the query service
    looks for one.
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[ProviderConfig] = None,
        backend: Optional[IndexBackend] = None,
        loader: DocumentLoader = load_documents,
        doc_roots: Optional[List[str]] = None,
        persist_dir: Optional[str] = None,
    ):
        """
        Args:
            settings: Application settings
            provider: Provider configuration (default: from settings)
            backend: Vector index backend (default: FAISS, created on ingest
                once the credential has been checked)
            loader: Callable loading documents from roots
            doc_roots: Override for settings.DOC_ROOTS
            persist_dir: Override for settings.PERSIST_DIR
        """
        self.settings = settings
        self.provider = provider or ProviderConfig.from_settings(settings)
        self._backend = backend
        self.loader = loader
        self.doc_roots = doc_roots or settings.get_doc_roots()
        self.persist_dir = Path(persist_dir or settings.PERSIST_DIR).resolve()
        self.loader_config = LoaderConfig.from_settings(settings)

    def _get_backend(self) -> IndexBackend:
        if self._backend is None:
            self._backend = FaissIndexBackend(self.provider)
        return self._backend

    async def _load(self) -> List[Document]:
        try:
            documents = await asyncio.to_thread(self.loader, self.doc_roots, self.loader_config)
        except (ConfigurationError, OSError) as e:
            raise IngestionError("loading", str(e), cause=e) from e

        if not documents:
            raise IngestionError(
                "loading",
                f"No documents found in {', '.join(self.doc_roots)}. "
                f"Make sure the roots contain {', '.join(sorted(self.loader_config.extensions))} files."
            )
        return documents

    def _swap_into_place(self, tmp_dir: Path) -> None:
        """Replace persist_dir with tmp_dir, restoring the previous index on failure."""
        backup_dir = self.persist_dir.parent / f"{self.persist_dir.name}.bak"
        _remove_tree(backup_dir)

        had_previous = self.persist_dir.exists()
        if had_previous:
            self.persist_dir.rename(backup_dir)
            logger.info(f"Backed up existing index to {backup_dir}")

        try:
            tmp_dir.rename(self.persist_dir)
        except OSError:
            if had_previous and backup_dir.exists():
                try:
                    backup_dir.rename(self.persist_dir)
                    logger.info("Restored backup index")
                except OSError as restore_error:
                    logger.error("Failed to restore backup: %s", restore_error)
            raise

        logger.info(f"Index successfully swapped: {tmp_dir} -> {self.persist_dir}")
        _remove_tree(backup_dir)

    async def ingest(self) -> IngestResult:
        """
        Run the full ingestion.

        Returns:
            IngestResult describing the persisted index

        Raises:
            ConfigurationError: If OPENAI_API_KEY is missing (raised before any
                document loading or network call)
            IngestionError: If loading, embedding or persistence fails; the
                stage attribute names which one
        """
        self.provider.require_api_key()

        logger.info("=" * 60)
        logger.info("INGESTION")
        logger.info("=" * 60)
        logger.info(f"Document roots: {', '.join(self.doc_roots)}")
        logger.info(f"Persist dir: {self.persist_dir}")

        lock = IndexLock(self.persist_dir, timeout_seconds=self.settings.INDEX_LOCK_TIMEOUT_SECONDS)
        if not await asyncio.to_thread(lock.acquire):
            owner = lock.owner()
            raise IngestionError(
                "persistence",
                f"Index rebuild is already in progress. Lock file: {lock.lock_file}, "
                f"PID: {owner.pid if owner else 'unknown'}. Try again later."
            )

        try:
            return await self._ingest_locked()
        finally:
            lock.release()

    async def _ingest_locked(self) -> IngestResult:
        # Stage 1: loading
        documents = await self._load()
        logger.info(f"Loaded {len(documents)} documents")

        chunks = await asyncio.to_thread(
            chunk_documents,
            documents,
            chunk_size=self.settings.CHUNK_SIZE,
            chunk_overlap=self.settings.CHUNK_OVERLAP,
            min_chunk_size=self.settings.MIN_CHUNK_SIZE,
        )
        if not chunks:
            raise IngestionError("loading", "Documents produced no indexable text")

        # Stage 2: embedding + index construction
        backend = self._get_backend()
        try:
            index = await backend.abuild_from_documents(chunks)
        except ConfigurationError:
            raise
        except ProviderError as e:
            raise IngestionError("embedding", str(e), cause=e) from e
        except Exception as e:
            logger.error(f"Index construction failed: {e}", exc_info=True)
            raise IngestionError("embedding", str(e), cause=e) from e

        # Stage 3: persistence via temporary directory + swap
        index_version = generate_index_version()
        tmp_dir = self.persist_dir.parent / f"{self.persist_dir.name}.tmp-{uuid.uuid4().hex[:8]}"
        logger.info(f"Building index version: {index_version}")
        logger.info(f"Saving index to temporary location {tmp_dir}...")

        meta = IndexMeta(
            index_version=index_version,
            docs_hash=compute_docs_hash(documents),
            doc_roots=[str(root) for root in self.doc_roots],
            embedding_model=self.provider.embedding_model,
            chunk_size=self.settings.CHUNK_SIZE,
            chunk_overlap=self.settings.CHUNK_OVERLAP,
            documents_count=len(documents),
            chunks_count=len(chunks),
        )

        try:
            tmp_dir.parent.mkdir(parents=True, exist_ok=True)
            await index.apersist(tmp_dir)
            await asyncio.to_thread(write_index_meta, tmp_dir, meta)
            await asyncio.to_thread(self._swap_into_place, tmp_dir)
        except Exception as e:
            _remove_tree(tmp_dir)
            logger.error(f"Failed to persist index: {e}", exc_info=True)
            raise IngestionError("persistence", str(e), cause=e) from e

        logger.info("Index successfully created and saved")
        logger.info(f"Index version: {index_version}")
        logger.info(f"Number of vectors in index: {index.size}")
        logger.info("=" * 60)

        return IngestResult(
            index_version=index_version,
            persist_dir=self.persist_dir,
            documents_count=len(documents),
            chunks_count=len(chunks),
        )
