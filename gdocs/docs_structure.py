"""
Google Docs Document Structure Parsing and Analysis

This module walks a content tree (see gdocs.docs_model) to linearize it into
text, index its headings, locate text runs by position and resolve tabs.

All walks are pure functions threading an explicit offset: they take the
offset at which a list of elements starts and return the offset where it ends.
When an element carries the index reported by the Docs API, the walk
re-anchors to it, so structural overhead the API charges (table and cell
boundaries) never skews later positions.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from gdocs.docs_model import (
    FIRST_INDEX,
    OPAQUE_ELEMENT_LENGTH,
    ContentTree,
    ElementVisitor,
    OpaqueElement,
    Paragraph,
    StructuralElement,
    Tab,
    Table,
    TextRun,
    TextStyle,
    utf16_len,
)
from gdocs.errors import DocsErrorBuilder, NotFoundError

logger = logging.getLogger(__name__)


# Google Docs heading types mapped to levels
HEADING_TYPES = {
    "HEADING_1": 1,
    "HEADING_2": 2,
    "HEADING_3": 3,
    "HEADING_4": 4,
    "HEADING_5": 5,
    "HEADING_6": 6,
    "TITLE": 0,  # Document title style
}


@dataclass(frozen=True)
class HeadingRecord:
    """A heading paragraph and the half-open range [start_index, end_index) it occupies."""

    level: str
    text: str
    start_index: int
    end_index: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StyledRange:
    start_index: int
    end_index: int
    text: str
    style: TextStyle

    def to_dict(self) -> Dict[str, Any]:
        return {
            "range": {"start": self.start_index, "end": self.end_index},
            "style": self.style.to_dict(),
            "text": self.text,
        }


def _start(element: Any, offset: int) -> int:
    return element.start_index if element.start_index is not None else offset


def _end(element: Any, computed: int) -> int:
    return element.end_index if element.end_index is not None else computed


class _TextExtractor(ElementVisitor[Tuple[str, int]]):
    """Returns (text, end_offset) for one element that begins at `offset`."""

    def __init__(self, offset: int):
        self.offset = offset

    def visit_paragraph(self, paragraph: Paragraph) -> Tuple[str, int]:
        start = _start(paragraph, self.offset)
        text = paragraph.text
        return text, _end(paragraph, start + utf16_len(text))

    def visit_table(self, table: Table) -> Tuple[str, int]:
        offset = _start(table, self.offset)
        parts = []
        for row in table.rows:
            for cell in row.cells:
                cell_text, offset = extract_text(cell.content, offset)
                parts.append(cell_text)
        return "".join(parts), _end(table, offset)

    def visit_opaque(self, element: OpaqueElement) -> Tuple[str, int]:
        start = _start(element, self.offset)
        return "", _end(element, start + OPAQUE_ELEMENT_LENGTH)


def extract_text(
    elements: List[StructuralElement], start_offset: int = FIRST_INDEX
) -> Tuple[str, int]:
    """
    Concatenate all text in document order.

    Args:
        elements: Structural elements of a body, tab or table cell
        start_offset: Offset at which the first element begins

    Returns:
        Tuple of (text, end_offset). Table cells continue the same offset
        sequence; opaque elements advance it by one unit without text.
    """
    parts = []
    offset = start_offset
    for element in elements:
        text, offset = element.accept(_TextExtractor(offset))
        parts.append(text)
    return "".join(parts), offset


def body_end_offset(elements: List[StructuralElement], start_offset: int = FIRST_INDEX) -> int:
    """End offset of a body: one past its trailing newline."""
    return extract_text(elements, start_offset)[1]


def document_end_index(elements: List[StructuralElement], start_offset: int = FIRST_INDEX) -> int:
    """
    Last position content may be inserted at or deleted up to.

    The body's trailing newline can never be deleted, so this is one short of
    the reported end and never less than the first index.
    """
    return max(start_offset, body_end_offset(elements, start_offset) - 1)


def ends_with_empty_paragraph(elements: List[StructuralElement]) -> bool:
    """True when the final paragraph holds nothing but its newline."""
    if not elements or not isinstance(elements[-1], Paragraph):
        return True
    return elements[-1].text.strip("\n") == ""


def is_heading_style(style_type: Optional[str]) -> bool:
    """
    Check if a paragraph style type is a heading style.

    Args:
        style_type: The paragraph style type (e.g., 'HEADING_1', 'NORMAL_TEXT')

    Returns:
        True if the style is a heading (HEADING_1-6 or TITLE), False otherwise
    """
    if style_type is None:
        return False
    return style_type in HEADING_TYPES


def find_headings(
    elements: List[StructuralElement], start_offset: int = FIRST_INDEX
) -> List[HeadingRecord]:
    """
    Get all headings in the body, in document order.

    Only top-level paragraphs are considered; tables are walked for their
    offsets but headings inside cells do not delimit sections.

    Args:
        elements: Structural elements of a body or tab
        start_offset: Offset at which the first element begins

    Returns:
        List of HeadingRecord with strictly increasing start_index
    """
    headings = []
    offset = start_offset
    for element in elements:
        element_start = _start(element, offset)
        _, offset = element.accept(_TextExtractor(offset))
        if isinstance(element, Paragraph) and is_heading_style(element.style.named_style_type):
            headings.append(
                HeadingRecord(
                    level=element.style.named_style_type,
                    text=element.text.strip(),
                    start_index=element_start,
                    end_index=offset,
                )
            )
    return headings


def _normalize(text: str) -> str:
    return text.strip().casefold()


def find_heading(headings: List[HeadingRecord], heading_text: str) -> Optional[int]:
    """
    Position in `headings` of the first heading matching heading_text.

    Matching ignores case and leading/trailing whitespace. Returns None when
    nothing matches.
    """
    target = _normalize(heading_text)
    for position, heading in enumerate(headings):
        if _normalize(heading.text) == target:
            return position
    return None


def require_heading(headings: List[HeadingRecord], heading_text: str) -> int:
    """Like find_heading, but a missing heading raises NotFoundError."""
    position = find_heading(headings, heading_text)
    if position is None:
        raise NotFoundError(
            DocsErrorBuilder.heading_not_found(heading_text, [h.text for h in headings])
        )
    return position


def iter_text_runs(
    elements: List[StructuralElement], start_offset: int = FIRST_INDEX
) -> Iterator[Tuple[TextRun, int, int]]:
    """
    Yield (run, start, end) for every text run, including runs inside tables.

    Run positions come from the indices the API reported when present; a run
    without them continues from the previous run.
    """
    offset = start_offset
    for element in elements:
        offset = _start(element, offset)
        if isinstance(element, Paragraph):
            run_offset = offset
            for run in element.runs:
                run_start = _start(run, run_offset)
                run_offset = _end(run, run_start + utf16_len(run.text))
                yield run, run_start, run_offset
            offset = _end(element, run_offset)
        elif isinstance(element, Table):
            for row in element.rows:
                for cell in row.cells:
                    yield from iter_text_runs(cell.content, offset)
                    offset = body_end_offset(cell.content, offset)
            offset = _end(element, offset)
        else:
            offset = _end(element, offset + OPAQUE_ELEMENT_LENGTH)


def _slice_utf16(text: str, start: int, end: int) -> str:
    encoded = text.encode("utf-16-le")
    return encoded[start * 2:end * 2].decode("utf-16-le", errors="ignore")


def find_styles_in_range(
    elements: List[StructuralElement], start_index: int, end_index: int
) -> List[StyledRange]:
    """
    Text runs intersecting [start_index, end_index), clipped to the range.

    Args:
        elements: Structural elements of a body or tab
        start_index: Inclusive start of the range
        end_index: Exclusive end of the range

    Returns:
        One StyledRange per intersecting run, in document order
    """
    results = []
    for run, run_start, run_end in iter_text_runs(elements):
        if run_end <= start_index or run_start >= end_index:
            continue
        clip_start = max(run_start, start_index)
        clip_end = min(run_end, end_index)
        text = _slice_utf16(run.text, clip_start - run_start, clip_end - run_start)
        results.append(StyledRange(clip_start, clip_end, text, run.style))
    return results


def iter_tabs(tabs: List[Tab]) -> Iterator[Tab]:
    """All tabs depth-first, child tabs right after their parent."""
    for tab in tabs:
        yield tab
        yield from iter_tabs(tab.children)


def find_tab(tree: ContentTree, tab_ref: str) -> Tab:
    """
    Resolve a tab by exact ID, then by title ignoring case and surrounding whitespace.

    When two tabs share a title the first one in document order wins.

    Raises:
        NotFoundError: if no tab matches
    """
    all_tabs = list(iter_tabs(tree.tabs))
    for tab in all_tabs:
        if tab.tab_id == tab_ref:
            return tab
    target = _normalize(tab_ref)
    for tab in all_tabs:
        if _normalize(tab.title) == target:
            return tab
    logger.warning(f"Tab '{tab_ref}' not found in document '{tree.document_id}'")
    raise NotFoundError(
        DocsErrorBuilder.tab_not_found(tab_ref, [f"{t.title} ({t.tab_id})" for t in all_tabs])
    )
