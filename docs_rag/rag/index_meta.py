"""
Index metadata: the ``index.meta.json`` file written beside every persisted index.
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

META_FILENAME = "index.meta.json"


def generate_index_version() -> str:
    """Return a new ``<unix-ts>-<8 hex>`` version identifier."""
    return f"{int(time.time())}-{uuid.uuid4().hex[:8]}"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class IndexMeta:
    """Describes how and from what a persisted index was built."""

    index_version: str
    docs_hash: str
    doc_roots: List[str]
    embedding_model: str
    chunk_size: int
    chunk_overlap: int
    documents_count: int
    chunks_count: int
    created_at: str = field(default_factory=_utc_now)
    notes: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "IndexMeta":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


def write_index_meta(index_dir: Union[str, Path], meta: IndexMeta) -> Path:
    """
    Write meta into index_dir, creating the directory if needed.

    Returns:
        Path of the written file

    Raises:
        OSError: If the file can't be written
    """
    index_dir = Path(index_dir)
    index_dir.mkdir(parents=True, exist_ok=True)
    meta_file = index_dir / META_FILENAME
    meta_file.write_text(json.dumps(meta.to_dict(), indent=2), encoding="utf-8")
    logger.debug(f"Saved index metadata to {meta_file}")
    return meta_file


def read_index_meta(index_dir: Union[str, Path]) -> Optional[IndexMeta]:
    """
    Read the metadata of a persisted index.

    Returns:
        IndexMeta, or None if the file is missing or unreadable
    """
    meta_file = Path(index_dir) / META_FILENAME
    if not meta_file.is_file():
        return None

    try:
        return IndexMeta.from_dict(json.loads(meta_file.read_text(encoding="utf-8")))
    except (OSError, ValueError, TypeError) as e:
        logger.warning(f"Error loading index metadata from {meta_file}: {e}")
        return None


def get_index_version(index_dir: Union[str, Path]) -> Optional[str]:
    meta = read_index_meta(index_dir)
    return meta.index_version if meta else None
