"""
Script for building the vector index.

Usage:
    python scripts/ingest.py [--root PATH ...] [--persist-dir PATH]

This script:
1. Loads all Markdown files from the documentation roots
2. Splits them into chunks
3. Builds the FAISS vector index with OpenAI embeddings
4. Replaces the index in the persistence directory

Re-run it after editing, adding or deleting documents; the previous index is
fully overwritten.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

from docs_rag.errors import ConfigurationError, IngestionError
from docs_rag.rag.indexing import IndexBuilder
from docs_rag.settings import Settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    """Main function for building the index."""
    load_dotenv()

    parser = argparse.ArgumentParser(description="Build FAISS vector index from documentation")
    parser.add_argument(
        "--root",
        dest="roots",
        action="append",
        help="Documentation root directory; repeatable (default: from Settings.DOC_ROOTS)"
    )
    parser.add_argument(
        "--persist-dir",
        type=str,
        help="Path to index directory (default: from Settings.PERSIST_DIR)"
    )
    args = parser.parse_args()

    settings = Settings()
    logging.getLogger().setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    builder = IndexBuilder(
        settings,
        doc_roots=args.roots,
        persist_dir=args.persist_dir,
    )

    try:
        result = asyncio.run(builder.ingest())
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except IngestionError as e:
        logger.error(str(e), exc_info=e.cause is not None)
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("Index successfully updated!")
    logger.info(f"Index version: {result.index_version}")
    logger.info(f"Documents: {result.documents_count}, chunks: {result.chunks_count}")
    logger.info(f"Saved to {result.persist_dir}")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
