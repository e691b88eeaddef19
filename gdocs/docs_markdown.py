"""
Markdown <-> Google Docs Conversion

Encoding walks a content tree and emits one Markdown block per paragraph.
Decoding splits Markdown into block descriptors (heading or paragraph), each
carrying inline-styled segments, which gdocs.docs_planner turns into edits.

Markdown is a lossy intermediate here: only headings and four inline styles
(bold, italic, strikethrough, code) are represented. Tables and tables of
contents are replaced by placeholder comments when reading.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from gdocs.docs_model import (
    NORMAL_TEXT,
    ElementVisitor,
    OpaqueElement,
    Paragraph,
    StructuralElement,
    Table,
    TextStyle,
)

logger = logging.getLogger(__name__)

HEADING_STYLE_PREFIXES = {
    "HEADING_1": "#",
    "HEADING_2": "##",
    "HEADING_3": "###",
    "HEADING_4": "####",
    "HEADING_5": "#####",
    "HEADING_6": "######",
}

TABLE_PLACEHOLDER = "<!-- table omitted -->"
TABLE_OF_CONTENTS_PLACEHOLDER = "<!-- table of contents omitted -->"

CODE_FONT_FAMILY = "Courier New"

HEADING_LINE = re.compile(r"^(#{1,6})\s+(.+)$")

# Order matters only for ties on the start offset: the earlier pattern wins.
INLINE_PATTERNS: List[Tuple[re.Pattern, TextStyle]] = [
    (re.compile(r"\*\*(.+?)\*\*"), TextStyle(bold=True)),
    (re.compile(r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)"), TextStyle(italic=True)),
    (re.compile(r"~~(.+?)~~"), TextStyle(strikethrough=True)),
    (re.compile(r"`([^`]+)`"), TextStyle(font_family=CODE_FONT_FAMILY)),
]

_EXCESS_NEWLINES = re.compile(r"\n{3,}")


class BlockKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"


@dataclass(frozen=True)
class Segment:
    """A run of text within a block; style is None for plain text."""

    text: str
    style: Optional[TextStyle] = None


@dataclass
class BlockDescriptor:
    kind: BlockKind
    segments: List[Segment] = field(default_factory=list)
    level: int = 0

    @property
    def named_style_type(self) -> str:
        if self.kind == BlockKind.HEADING:
            return f"HEADING_{self.level}"
        return NORMAL_TEXT

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)


class _MarkdownEncoder(ElementVisitor[str]):
    def visit_paragraph(self, paragraph: Paragraph) -> str:
        text = paragraph.text.strip()
        prefix = HEADING_STYLE_PREFIXES.get(paragraph.style.named_style_type)
        if prefix:
            return f"{prefix} {text}\n\n"
        # Empty paragraphs are dropped rather than kept as blank lines
        return f"{text}\n\n" if text else ""

    def visit_table(self, table: Table) -> str:
        return f"{TABLE_PLACEHOLDER}\n\n"

    def visit_opaque(self, element: OpaqueElement) -> str:
        if element.kind == "tableOfContents":
            return f"{TABLE_OF_CONTENTS_PLACEHOLDER}\n\n"
        return ""


def to_markdown(elements: List[StructuralElement]) -> str:
    """
    Encode a body or tab as Markdown.

    Args:
        elements: Structural elements to encode

    Returns:
        Markdown with blocks separated by exactly one blank line, trimmed
    """
    encoder = _MarkdownEncoder()
    markdown = "".join(element.accept(encoder) for element in elements)
    return _EXCESS_NEWLINES.sub("\n\n", markdown).strip()


def parse_inline_formatting(text: str) -> List[Segment]:
    """
    Split a line into plain and styled segments.

    Matches from all patterns are sorted by start offset and accepted greedily
    from the left; a match that overlaps an accepted one is discarded. Nested
    markup such as '**bold *and* italic**' therefore yields one bold segment
    whose text still contains the inner asterisks.
    """
    matches = []
    for order, (pattern, style) in enumerate(INLINE_PATTERNS):
        for match in pattern.finditer(text):
            matches.append((match.start(), order, match, style))
    matches.sort(key=lambda item: (item[0], item[1]))

    segments = []
    cursor = 0
    for start, _, match, style in matches:
        if start < cursor:
            continue
        if start > cursor:
            segments.append(Segment(text[cursor:start]))
        segments.append(Segment(match.group(1), style))
        cursor = match.end()

    if cursor < len(text):
        segments.append(Segment(text[cursor:]))
    if not segments:
        segments.append(Segment(text))
    return segments


def parse_markdown(markdown: str) -> List[BlockDescriptor]:
    """
    Decode Markdown into block descriptors.

    Every line is one block: '#'..'######' lines become headings, other lines
    paragraphs. Blank lines become empty paragraphs (a bare newline in the
    document) except trailing ones. Any input, including '', yields at least
    one block.
    """
    lines = markdown.splitlines() or [""]
    while len(lines) > 1 and not lines[-1].strip():
        lines.pop()

    blocks = []
    for line in lines:
        heading = HEADING_LINE.match(line)
        if heading:
            blocks.append(
                BlockDescriptor(
                    kind=BlockKind.HEADING,
                    level=len(heading.group(1)),
                    segments=parse_inline_formatting(heading.group(2).strip()),
                )
            )
        elif line.strip():
            blocks.append(
                BlockDescriptor(kind=BlockKind.PARAGRAPH, segments=parse_inline_formatting(line))
            )
        else:
            blocks.append(BlockDescriptor(kind=BlockKind.PARAGRAPH, segments=[Segment("")]))

    logger.debug(f"Parsed markdown into {len(blocks)} blocks")
    return blocks
