"""
Chain module: retrieval + answer synthesis over a loaded index.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from langchain_core.documents import Document
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable

from docs_rag.errors import translate_provider_error
from docs_rag.rag.backend import IndexHandle

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an assistant answering questions about SDK and plugin development "
    "using the project documentation. Base your answer on the documentation "
    "fragments you are given. If they don't contain the answer, say so."
)

HUMAN_TEMPLATE = (
    "Documentation context (relevant fragments):\n\n"
    "{context}\n\n"
    "---\n\n"
    "User question: {input}\n\n"
    "Instructions:\n"
    "- Use the information from the context\n"
    "- Answer as clearly and structurally as possible\n"
    "- Provide examples and step-by-step instructions when helpful\n"
    "- If the context is insufficient, explain what exactly is missing"
)


def format_context(chunks: List[Document]) -> str:
    """
    Render retrieved chunks as prompt context.

    Args:
        chunks: Retrieved chunks

    Returns:
        Context text, one block per chunk headed by its source
    """
    blocks = []
    for chunk in chunks:
        source = chunk.metadata.get("source") or chunk.metadata.get("file_path") or "unknown"
        section = chunk.metadata.get("section_title")
        header = f"[{source}#{section}]" if section else f"[{source}]"
        blocks.append(f"{header}\n{chunk.page_content}")
    return "\n\n".join(blocks)


@dataclass
class QueryAnswer:
    """Answer text plus where its context came from."""

    answer: str
    sources: List[Dict[str, Any]] = field(default_factory=list)


class QueryEngine:
    """Top-K retrieval followed by one LLM call."""

    def __init__(self, index: IndexHandle, llm: Runnable, top_k: int = 5):
        self.index = index
        self.top_k = top_k
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", SYSTEM_PROMPT),
            ("human", HUMAN_TEMPLATE),
        ])
        self.chain = self.prompt | llm | StrOutputParser()

    async def aquery(self, question: str) -> QueryAnswer:
        """
        Answer one question.

        Raises:
            ProviderError: If retrieval embedding or generation fails
        """
        chunks = await self.index.aretrieve(question, self.top_k)
        logger.info(f"Retrieved {len(chunks)} chunks (top_k={self.top_k})")

        try:
            answer = await self.chain.ainvoke({
                "context": format_context(chunks),
                "input": question,
            })
        except Exception as e:
            translated = translate_provider_error(e)
            if translated is e:
                raise
            logger.error(f"LLM call failed: {translated}")
            raise translated from e

        sources = [
            {
                "source": chunk.metadata.get("source", ""),
                "file_path": chunk.metadata.get("file_path", ""),
                "section_title": chunk.metadata.get("section_title", ""),
            }
            for chunk in chunks
        ]
        return QueryAnswer(answer=answer, sources=sources)
