"""
Vector index backend: the narrow seam between this package and the vector library.

FaissIndexBackend uses LangChain's FAISS wrapper with OpenAI embeddings. Tests
swap in an in-memory backend implementing the same two abstract classes.
"""

import asyncio
import logging
import pickle
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

from langchain_community.vectorstores import FAISS
from langchain_core.documents import Document

from docs_rag.errors import IndexNotBuiltError, translate_provider_error
from docs_rag.infra.openai_utils import ProviderConfig, get_embeddings_client

logger = logging.getLogger(__name__)

FAISS_INDEX_NAME = "index"


class IndexHandle(ABC):
    """A built or loaded vector index."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of stored vectors."""

    @abstractmethod
    async def aretrieve(self, query: str, top_k: int) -> List[Document]:
        """Return the top_k chunks most similar to query."""

    @abstractmethod
    async def apersist(self, path: Union[str, Path]) -> None:
        """Write the index into directory path."""


class IndexBackend(ABC):
    """Builds indexes from documents and loads persisted ones."""

    @abstractmethod
    async def abuild_from_documents(self, documents: List[Document]) -> IndexHandle:
        """Embed documents and build an index."""

    @abstractmethod
    async def aload_from_disk(self, path: Union[str, Path]) -> IndexHandle:
        """
        Load a persisted index.

        Raises:
            IndexNotBuiltError: If nothing usable is persisted at path
        """

    @abstractmethod
    def index_exists(self, path: Union[str, Path]) -> bool:
        """Whether path holds a persisted index."""


class FaissIndexHandle(IndexHandle):
    """IndexHandle over a LangChain FAISS vectorstore."""

    def __init__(self, vectorstore: FAISS):
        self.vectorstore = vectorstore

    @property
    def size(self) -> int:
        return self.vectorstore.index.ntotal

    async def aretrieve(self, query: str, top_k: int) -> List[Document]:
        try:
            return await self.vectorstore.asimilarity_search(query, k=top_k)
        except Exception as e:
            translated = translate_provider_error(e)
            if translated is e:
                raise
            raise translated from e

    async def apersist(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(self.vectorstore.save_local, str(path), FAISS_INDEX_NAME)
        logger.info(f"Saved FAISS index ({self.size} vectors) to {path}")


class FaissIndexBackend(IndexBackend):
    """FAISS index embedded with OpenAI."""

    def __init__(self, provider: ProviderConfig, build_timeout: Optional[int] = None):
        """
        Args:
            provider: Provider configuration (must carry an API key)
            build_timeout: Per-request timeout for embedding batches during
                builds; defaults to provider.batch_timeout
        """
        self.provider = provider
        self.embeddings = get_embeddings_client(provider)
        self.build_embeddings = get_embeddings_client(
            provider,
            timeout=build_timeout if build_timeout is not None else provider.batch_timeout,
        )

    def index_exists(self, path: Union[str, Path]) -> bool:
        path = Path(path)
        return (path / f"{FAISS_INDEX_NAME}.faiss").is_file() and (path / f"{FAISS_INDEX_NAME}.pkl").is_file()

    async def abuild_from_documents(self, documents: List[Document]) -> IndexHandle:
        logger.info(f"Generating embeddings for {len(documents)} chunks with {self.provider.embedding_model}...")
        logger.info("(This may take several minutes for large number of chunks)")
        try:
            vectorstore = await FAISS.afrom_documents(documents, self.build_embeddings)
        except Exception as e:
            translated = translate_provider_error(e)
            if translated is e:
                raise
            raise translated from e

        logger.info(f"Vector dimension: {vectorstore.index.d}")
        return FaissIndexHandle(vectorstore)

    async def aload_from_disk(self, path: Union[str, Path]) -> IndexHandle:
        path = Path(path)
        if not self.index_exists(path):
            raise IndexNotBuiltError(
                f"No index found in {path}. Run ingestion first (python scripts/ingest.py)."
            )

        try:
            # The pickle is written by our own ingest step
            vectorstore = await asyncio.to_thread(
                FAISS.load_local,
                str(path),
                self.embeddings,
                FAISS_INDEX_NAME,
                allow_dangerous_deserialization=True,
            )
        except (OSError, RuntimeError, ValueError, EOFError, pickle.UnpicklingError) as e:
            raise IndexNotBuiltError(
                f"Index in {path} could not be read ({e}). Re-run ingestion."
            ) from e

        logger.info(f"Number of vectors in index: {vectorstore.index.ntotal}")
        return FaissIndexHandle(vectorstore)
