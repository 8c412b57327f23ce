"""
Query service: lazily loads the persisted index once and answers questions.
"""

import asyncio
import enum
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from langchain_core.runnables import Runnable

from docs_rag.errors import InvalidQuestionError
from docs_rag.infra.openai_utils import ProviderConfig, get_chat_llm
from docs_rag.rag.backend import FaissIndexBackend, IndexBackend
from docs_rag.rag.chain import QueryAnswer, QueryEngine
from docs_rag.rag.index_meta import get_index_version
from docs_rag.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class QueryServiceState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


def validate_question(question: Any) -> str:
    """
    Check a question before any provider or disk cost is incurred.

    Returns:
        The question stripped of surrounding whitespace

    Raises:
        InvalidQuestionError: If question is not a non-empty string
    """
    if not isinstance(question, str):
        raise InvalidQuestionError(f"Question must be a string, got {type(question).__name__}")
    question = question.strip()
    if not question:
        raise InvalidQuestionError("Question must not be empty")
    return question


class QueryService:
    """
    Owns the process's query engine.

    The engine is built on first use; concurrent first callers share one
    build. After that, queries reuse the cached engine with no disk I/O.
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[ProviderConfig] = None,
        backend: Optional[IndexBackend] = None,
        llm: Optional[Runnable] = None,
        persist_dir: Optional[str] = None,
    ):
        """
        Args:
            settings: Application settings
            provider: Provider configuration (default: from settings)
            backend: Index backend (default: FAISS, created on first load)
            llm: Chat model (default: ChatOpenAI from provider)
            persist_dir: Override for settings.PERSIST_DIR
        """
        self.settings = settings
        self.provider = provider or ProviderConfig.from_settings(settings)
        self.persist_dir = Path(persist_dir or settings.PERSIST_DIR).resolve()
        self.top_k = settings.TOP_K
        self._backend = backend
        self._llm = llm
        self._engine: Optional[QueryEngine] = None
        self._state = QueryServiceState.UNINITIALIZED
        self._loading: Optional["asyncio.Future[QueryEngine]"] = None
        self.index_version: Optional[str] = None

    @property
    def state(self) -> QueryServiceState:
        return self._state

    async def _load_engine(self) -> QueryEngine:
        logger.info("=" * 60)
        logger.info("QUERY ENGINE INITIALIZATION")
        logger.info("=" * 60)

        if self._backend is None:
            self._backend = FaissIndexBackend(self.provider)
        if self._llm is None:
            self._llm = get_chat_llm(self.provider)

        logger.info(f"Loading index from {self.persist_dir}...")
        index = await self._backend.aload_from_disk(self.persist_dir)

        self.index_version = get_index_version(self.persist_dir)
        if self.index_version:
            logger.info(f"Index version: {self.index_version}")

        engine = QueryEngine(index, self._llm, top_k=self.top_k)
        logger.info("Query engine is ready")
        logger.info("=" * 60)
        return engine

    async def _build_engine(self) -> QueryEngine:
        try:
            engine = await self._load_engine()
        except BaseException:
            self._state = QueryServiceState.UNINITIALIZED
            raise
        finally:
            self._loading = None

        self._engine = engine
        self._state = QueryServiceState.READY
        return engine

    async def get_engine(self) -> QueryEngine:
        """
        Return the cached engine, building it on first call.

        Callers arriving while a build is in flight await that same build
        and share its result or its error. A failed build is not cached;
        the next call starts a new one.

        Raises:
            IndexNotBuiltError: If no persisted index exists
            ConfigurationError: If OPENAI_API_KEY is missing
        """
        if self._engine is not None:
            return self._engine

        if self._loading is None:
            self._state = QueryServiceState.LOADING
            self._loading = asyncio.ensure_future(self._build_engine())

        # shield: one cancelled caller must not cancel the shared build
        return await asyncio.shield(self._loading)

    async def answer(self, question: Any) -> QueryAnswer:
        """Like query(), but also returns the retrieved sources."""
        question = validate_question(question)
        engine = await self.get_engine()
        logger.info(f"Querying: {question[:100]}")
        return await engine.aquery(question)

    async def query(self, question: Any) -> str:
        """
        Answer a natural-language question against the persisted index.

        Args:
            question: Non-empty question text

        Returns:
            Generated answer text

        Raises:
            InvalidQuestionError: Empty or non-string question (no I/O done)
            IndexNotBuiltError: Ingestion has not been run
            ProviderError: Embedding or LLM call failed
        """
        result = await self.answer(question)
        return result.answer


@lru_cache()
def get_query_service() -> QueryService:
    """
    Get the process-wide query service (cached).

    Returns:
        QueryService instance
    """
    return QueryService(get_settings())


async def query(question: str) -> str:
    """Answer question with the process-wide query service."""
    return await get_query_service().query(question)
