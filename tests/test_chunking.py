"""
Unit tests for Markdown section extraction and chunking.
"""

from langchain_core.documents import Document

from docs_rag.core.markdown_utils import extract_sections, slugify
from docs_rag.rag.chunking import chunk_documents


def _doc(text: str, name: str = "guide.md") -> Document:
    return Document(
        page_content=text,
        id=f"/docs/{name}",
        metadata={"file_path": f"/docs/{name}", "source": name, "filename": name},
    )


def test_extract_sections_splits_on_headers():
    text = "Intro text\n\n# Title\n\nBody\n\n## Sub section ##\n\nMore"

    sections = extract_sections(text)

    assert [(level, title) for level, title, _ in sections] == [
        (0, ""),
        (1, "Title"),
        (2, "Sub section"),
    ]
    assert "More" in sections[2][2]


def test_extract_sections_ignores_headers_inside_code_fences():
    text = "# Install\n\n```bash\n# install dependencies\nnpm install\n```\n\nDone"

    sections = extract_sections(text)

    assert len(sections) == 1
    assert sections[0][1] == "Install"
    assert "# install dependencies" in sections[0][2]


def test_extract_sections_skips_empty_sections():
    sections = extract_sections("# Empty\n\n# Full\n\ncontent")

    assert [title for _, title, _ in sections] == ["Full"]


def test_slugify():
    assert slugify("Property Inspector") == "property-inspector"
    assert slugify("  keyDown / keyUp events! ") == "keydown-keyup-events"


def test_chunks_carry_parent_and_section_metadata():
    text = "# Actions\n\n" + "Actions respond to key presses. " * 20
    chunks = chunk_documents([_doc(text)], chunk_size=200, chunk_overlap=20, min_chunk_size=50)

    assert len(chunks) > 1
    for chunk in chunks:
        assert len(chunk.page_content) <= 200
        assert chunk.metadata["document_id"] == "/docs/guide.md"
        assert chunk.metadata["source"] == "guide.md"
        assert chunk.metadata["section_title"] == "Actions"
        assert chunk.metadata["section_anchor"] == "actions"


def test_short_document_keeps_its_longest_chunk():
    chunks = chunk_documents([_doc("# Tiny\n\nShort page.")], min_chunk_size=200)

    assert len(chunks) == 1
    assert "Short page." in chunks[0].page_content


def test_short_chunks_are_dropped_when_longer_ones_exist():
    text = "# Long\n\n" + "word " * 100 + "\n\n# Short\n\nx"
    chunks = chunk_documents([_doc(text)], chunk_size=1500, chunk_overlap=0, min_chunk_size=100)

    assert [c.metadata["section_title"] for c in chunks] == ["Long"]


def test_empty_input_and_blank_documents():
    assert chunk_documents([]) == []
    assert chunk_documents([_doc("   \n\n  ")]) == []


def test_overlap_larger_than_size_is_tolerated():
    chunks = chunk_documents([_doc("a " * 200)], chunk_size=50, chunk_overlap=500, min_chunk_size=1)

    assert chunks
