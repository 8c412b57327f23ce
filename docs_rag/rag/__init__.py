"""
RAG modules for loading, indexing and querying.
"""

# Re-export for convenience
from docs_rag.rag.loader import LoaderConfig, load_documents, compute_docs_hash
from docs_rag.rag.chunking import chunk_documents
from docs_rag.rag.backend import IndexBackend, IndexHandle, FaissIndexBackend
from docs_rag.rag.indexing import IndexBuilder, IngestResult
from docs_rag.rag.chain import QueryEngine, QueryAnswer

__all__ = [
    "LoaderConfig",
    "load_documents",
    "compute_docs_hash",
    "chunk_documents",
    "IndexBackend",
    "IndexHandle",
    "FaissIndexBackend",
    "IndexBuilder",
    "IngestResult",
    "QueryEngine",
    "QueryAnswer",
]
