"""
Section-relative position resolution.

A section is the span between one heading's end and the next heading's start,
or the end of the document when no heading follows. These helpers turn heading
names into concrete indices for insert/append/replace operations.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from gdocs.docs_helpers import clamp_index
from gdocs.docs_model import FIRST_INDEX
from gdocs.docs_structure import HeadingRecord, find_heading, require_heading
from gdocs.errors import DocsErrorBuilder, InvalidRangeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionRange:
    heading: HeadingRecord
    start_index: int
    end_index: int


def section_at(headings: List[HeadingRecord], position: int, document_end: int) -> SectionRange:
    """The body of headings[position]: [heading.end_index, next.start_index or document_end)."""
    heading = headings[position]
    if position + 1 < len(headings):
        end = headings[position + 1].start_index
    else:
        end = document_end
    start = clamp_index(heading.end_index, FIRST_INDEX, document_end)
    return SectionRange(heading, start, clamp_index(end, start, document_end))


def list_sections(headings: List[HeadingRecord], document_end: int) -> List[SectionRange]:
    return [section_at(headings, position, document_end) for position in range(len(headings))]


def resolve_insert_after_heading(
    headings: List[HeadingRecord], heading_text: str, document_end: int
) -> int:
    """Index right after the heading's paragraph, i.e. the start of its section."""
    position = require_heading(headings, heading_text)
    return clamp_index(headings[position].end_index, FIRST_INDEX, document_end)


def resolve_append_to_section(
    headings: List[HeadingRecord], heading_text: str, document_end: int
) -> int:
    """Index at the end of the section: the next heading's start, or the document end."""
    position = require_heading(headings, heading_text)
    return section_at(headings, position, document_end).end_index


def resolve_section_replacement(
    headings: List[HeadingRecord],
    start_heading: str,
    document_end: int,
    end_heading: Optional[str] = None,
    preserve_heading: bool = True,
) -> Tuple[int, int]:
    """
    Range to replace for a section.

    Args:
        headings: Headings of the body, in document order
        start_heading: Heading that opens the section
        document_end: Last index that may be deleted up to
        end_heading: Optional heading that closes the range; the range stops
            at its start, so the end heading itself is kept. It is looked up
            among the headings after start_heading.
        preserve_heading: Keep the start heading and replace only its body
            (True), or replace the heading too (False)

    Returns:
        (start, end) half-open range; may be empty when the section has no body

    Raises:
        NotFoundError: if either heading does not resolve
        InvalidRangeError: if end_heading only occurs before start_heading
    """
    position = require_heading(headings, start_heading)
    heading = headings[position]
    start = heading.end_index if preserve_heading else heading.start_index
    start = clamp_index(start, FIRST_INDEX, document_end)

    if end_heading is None:
        end = section_at(headings, position, document_end).end_index
    else:
        following = headings[position + 1:]
        end_position = find_heading(following, end_heading)
        if end_position is None:
            earlier = require_heading(headings, end_heading)
            raise InvalidRangeError(
                DocsErrorBuilder.invalid_index_range(start, headings[earlier].start_index)
            )
        end = following[end_position].start_index

    end = clamp_index(end, start, document_end)
    logger.debug(f"Section '{heading.text}' resolves to [{start}, {end})")
    return start, end
