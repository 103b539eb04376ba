"""Header-delimited section parsing.

Splits a document into sections at ATX-style header lines (one to six '#'
characters, whitespace, then text). Content before the first header becomes a
synthetic level-0 preamble section. Nothing else of markdown syntax is
interpreted, so a '#' line inside a fenced code block still starts a section.

Parsing is lossless: render_sections(parse_sections(text)) == text.

Example:
    >>> sections = parse_sections("intro\\n## Setup\\nrun it\\n")
    >>> [(s.level, s.header_text) for s in sections]
    [(0, ''), (2, 'Setup')]
"""

import re
from typing import List, Optional

from safeupdate.models import MarkdownSection

HEADER_PATTERN = re.compile(r"^(#{1,6})\s+(\S.*)$")


def parse_header(line: str) -> Optional[re.Match]:
    """Return the header match for a line, or None if it is not a header."""
    return HEADER_PATTERN.match(line)


def parse_sections(text: str) -> List[MarkdownSection]:
    """Split text into ordered sections.

    Lines are split on LF only, so a trailing newline yields a final empty
    body line and CR characters stay attached to their lines.

    Args:
        text: Document text.

    Returns:
        Sections in document order. An empty document yields a single empty
        preamble.
    """
    sections: List[MarkdownSection] = []
    current: Optional[MarkdownSection] = None

    for line_number, line in enumerate(text.split("\n"), start=1):
        match = parse_header(line)
        if match is not None:
            if current is not None:
                sections.append(current)
            current = MarkdownSection(
                header_text=match.group(2).strip(),
                level=len(match.group(1)),
                header_line=line,
                line_start=line_number,
                line_end=line_number,
            )
            continue

        if current is None:
            current = MarkdownSection(
                header_text="",
                level=0,
                header_line=None,
                line_start=line_number,
                line_end=line_number,
            )
        current.body_lines.append(line)
        current.line_end = line_number

    if current is not None:
        sections.append(current)
    return sections


def render_sections(sections: List[MarkdownSection]) -> str:
    """Reassemble sections into document text."""
    lines: List[str] = []
    for section in sections:
        lines.extend(section.lines)
    return "\n".join(lines)
