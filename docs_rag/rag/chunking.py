"""
Chunking module: Markdown-aware document splitting.
"""

import logging
from typing import List

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

from docs_rag.core.markdown_utils import extract_sections, slugify

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1500
DEFAULT_CHUNK_OVERLAP = 300
DEFAULT_MIN_CHUNK_SIZE = 200


def _make_splitter(chunk_size: int, chunk_overlap: int) -> RecursiveCharacterTextSplitter:
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        # The splitter rejects overlap >= size
        chunk_overlap=min(chunk_overlap, max(chunk_size - 1, 0)),
        separators=[
            "\n\n```",
            "\n\n## ",
            "\n\n### ",
            "\n\n#### ",
            "\n\n",
            "\n",
            ". ",
            " ",
            "",
        ],
        length_function=len,
        keep_separator=True,
    )


def chunk_documents(
    documents: List[Document],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    min_chunk_size: int = DEFAULT_MIN_CHUNK_SIZE,
) -> List[Document]:
    """
    Splits documents into chunks considering Markdown structure.

    First splits by sections, then applies RecursiveCharacterTextSplitter
    within sections. Chunks shorter than min_chunk_size are discarded unless
    they are the only text a document has, so short pages stay searchable.

    Args:
        documents: Loaded documents
        chunk_size: Maximum chunk size in characters
        chunk_overlap: Number of overlapping characters between chunks
        min_chunk_size: Minimum chunk size

    Returns:
        Chunk documents without ids, carrying parent metadata plus
        document_id and section fields
    """
    if not documents:
        logger.warning("Received empty document list")
        return []

    logger.info(
        "Chunking %s documents: chunk_size=%s, chunk_overlap=%s, min_chunk_size=%s",
        len(documents),
        chunk_size,
        chunk_overlap,
        min_chunk_size,
    )

    text_splitter = _make_splitter(chunk_size, chunk_overlap)
    all_chunks = []

    for doc in documents:
        base_metadata = dict(doc.metadata)
        base_metadata["document_id"] = doc.id

        sections = extract_sections(doc.page_content)
        if not sections:
            logger.debug(f"Skipping empty document: {doc.id}")
            continue

        doc_chunks = []
        for section_level, section_title, section_content in sections:
            for chunk_text in text_splitter.split_text(section_content):
                if not chunk_text.strip():
                    continue
                metadata = dict(base_metadata)
                if section_title:
                    metadata["section_title"] = section_title
                    metadata["section_level"] = section_level
                    metadata["section_anchor"] = slugify(section_title)
                doc_chunks.append(Document(page_content=chunk_text, metadata=metadata))

        kept = [c for c in doc_chunks if len(c.page_content) >= min_chunk_size]
        if not kept and doc_chunks:
            kept = [max(doc_chunks, key=lambda c: len(c.page_content))]
        all_chunks.extend(kept)

    logger.info(f"Total chunks created: {len(all_chunks)}")
    logger.info(f"Chunks with sections: {sum(1 for c in all_chunks if 'section_title' in c.metadata)}")
    return all_chunks
