"""
Markdown helpers used by chunking: section extraction and heading anchors.
"""

import re
from typing import List, NamedTuple

HEADER_RE = re.compile(r'^(#{1,6})\s+(.+?)\s*#*\s*$')
FENCE_RE = re.compile(r'^\s*(```|~~~)')


class Section(NamedTuple):
    """A heading and the text under it; level 0 is text before any heading."""

    level: int
    title: str
    content: str


def extract_sections(text: str) -> List[Section]:
    """
    Split Markdown text at its ATX headings.

    Lines inside fenced code blocks never count as headings, so shell
    comments like "# install" stay in their section. Sections with no
    non-whitespace content are dropped.
    """
    sections: List[Section] = []
    level, title, lines = 0, "", []
    in_fence = False

    def flush():
        content = "\n".join(lines)
        if content.strip():
            sections.append(Section(level, title, content))

    for line in text.split("\n"):
        if FENCE_RE.match(line):
            in_fence = not in_fence
        match = None if in_fence else HEADER_RE.match(line)
        if match is None:
            lines.append(line)
            continue

        flush()
        level, title, lines = len(match.group(1)), match.group(2), []

    flush()
    return sections


def slugify(text: str) -> str:
    """
    Heading text to anchor slug ("Property Inspector" -> "property-inspector").
    """
    text = re.sub(r'[^\w\s-]', '', text.lower())
    return re.sub(r'[-\s]+', '-', text).strip('-')
