"""
Ask one question against the persisted index.

Usage:
    python scripts/test_query.py ["How do I create a basic plugin?"]
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

from docs_rag.errors import ConfigurationError, InvalidQuestionError, ProviderError
from docs_rag.services.query_service import query

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_QUESTION = "How do I create a basic Stream Deck plugin?"


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Query the documentation index")
    parser.add_argument("question", nargs="?", default=DEFAULT_QUESTION)
    args = parser.parse_args()

    print("--- Starting RAG Query Test ---\n")
    print(f"Question: {args.question}\n")

    try:
        answer = asyncio.run(query(args.question))
    except (ConfigurationError, InvalidQuestionError, ProviderError) as e:
        logger.error(f"Query failed: {e}")
        sys.exit(1)

    print("\n--- Final Answer ---")
    print(answer)
    print("\n--- Test Complete ---")


if __name__ == "__main__":
    main()
