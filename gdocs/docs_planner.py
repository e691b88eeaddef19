"""
Edit Operation Planner

Turns decoded Markdown blocks into an ordered batch of primitive edits whose
indices already account for every earlier edit in the same batch.

Invariant: a batch produced here inserts text strictly left to right, so each
operation's index equals the previous operation's index plus the length it
inserted. Style operations never shift positions.
"""

import logging
from typing import List, Optional, Tuple

from gdocs.docs_helpers import (
    DeleteRange,
    EditOperation,
    InsertText,
    SetParagraphStyle,
    SetTextStyle,
)
from gdocs.docs_markdown import BlockDescriptor
from gdocs.docs_model import TextStyle, utf16_len

logger = logging.getLogger(__name__)


def plan_insertion(
    blocks: List[BlockDescriptor],
    start_index: int,
    tab_id: Optional[str] = None,
    at_document_end: bool = False,
    break_before: bool = False,
) -> List[EditOperation]:
    """
    Plan the edits that insert `blocks` at `start_index`.

    For each block, every segment is inserted at the running cursor, the last
    one followed by a newline that terminates the block's paragraph. Every
    non-empty segment then gets a text style over its own text only (never the
    newline): its Markdown style, or a reset of the inline attributes for plain
    text, which would otherwise take on the style of the character before it.
    Each block then gets exactly one paragraph style covering its whole span.

    Args:
        blocks: Decoded Markdown blocks
        start_index: Where the first block begins
        tab_id: Tab to target; applied to every operation
        at_document_end: Omit the last block's newline; the body's own
            trailing newline terminates that paragraph instead
        break_before: Start with a newline so the first block begins a new
            paragraph rather than extending the one at start_index

    Returns:
        Ordered list of edit operations
    """
    operations: List[EditOperation] = []
    cursor = start_index

    if break_before:
        operations.append(InsertText(cursor, "\n", tab_id))
        cursor += 1

    for block_number, block in enumerate(blocks):
        block_start = cursor
        is_last_block = block_number == len(blocks) - 1
        for segment_number, segment in enumerate(block.segments):
            is_last_segment = segment_number == len(block.segments) - 1
            terminate = is_last_segment and not (at_document_end and is_last_block)
            text = segment.text + "\n" if terminate else segment.text
            if not text:
                continue

            segment_start = cursor
            operations.append(InsertText(cursor, text, tab_id))
            cursor += utf16_len(text)

            if segment.text:
                operations.append(
                    SetTextStyle(
                        segment_start,
                        segment_start + utf16_len(segment.text),
                        segment.style,
                        tab_id,
                    )
                )

        operations.append(
            SetParagraphStyle(
                block_start, max(cursor, block_start + 1), block.named_style_type, tab_id
            )
        )

    logger.debug(
        f"Planned {len(operations)} operations for {len(blocks)} blocks at index {start_index}"
    )
    return operations


def plan_replacement(
    old_range: Tuple[int, int],
    blocks: List[BlockDescriptor],
    tab_id: Optional[str] = None,
    at_document_end: bool = False,
    break_before: bool = False,
) -> List[EditOperation]:
    """
    Plan the edits that replace old_range with `blocks`.

    The delete is emitted only when the range is non-empty; an empty or
    inverted range degrades to a plain insertion at its start.
    """
    start, end = old_range
    operations: List[EditOperation] = []
    if end > start:
        operations.append(DeleteRange(start, end, tab_id))
    operations.extend(
        plan_insertion(
            blocks,
            start,
            tab_id,
            at_document_end=at_document_end,
            break_before=break_before,
        )
    )
    return operations


def inserted_length(operations: List[EditOperation]) -> int:
    """Total length inserted by a batch."""
    return sum(op.length for op in operations if isinstance(op, InsertText))


def overlay_text_style(
    operations: List[EditOperation],
    start_index: int,
    end_index: int,
    style: Optional[TextStyle],
    tab_id: Optional[str] = None,
) -> List[EditOperation]:
    """
    Append a text style over [start_index, end_index) to a planned batch.

    It is applied after the per-segment styles, so caller-supplied attributes
    win where both set the same field. Nothing is added for an empty style or
    an empty range.
    """
    if style is None or style.is_empty() or end_index <= start_index:
        return operations
    return operations + [SetTextStyle(start_index, end_index, style, tab_id)]
