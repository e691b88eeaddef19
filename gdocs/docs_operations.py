"""
Google Docs core operations.

Each operation takes the request's DocsGateway explicitly, reads one fresh
snapshot of the document, computes edits with the pure helpers (structure,
markdown, planner, sections) and applies them in one batch (two for a full
rewrite). Errors are DocsOperationError subclasses from gdocs.errors.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from gdocs.docs_gateway import DocsGateway, DocumentSummary
from gdocs.docs_helpers import DeleteRange, InsertText, clamp_index
from gdocs.docs_markdown import parse_markdown, to_markdown
from gdocs.docs_model import FIRST_INDEX, ContentTree, StructuralElement, Tab, TextStyle
from gdocs.docs_planner import inserted_length, overlay_text_style, plan_insertion, plan_replacement
from gdocs.docs_sections import (
    resolve_append_to_section,
    resolve_insert_after_heading,
    resolve_section_replacement,
)
from gdocs.docs_structure import (
    HeadingRecord,
    StyledRange,
    document_end_index,
    ends_with_empty_paragraph,
    extract_text,
    find_headings,
    find_styles_in_range,
    find_tab,
)
from gdocs.errors import DocsErrorBuilder, InvalidParameterError
from gdocs.managers.batch_operation_manager import BatchExecutionResult, BatchOperationManager
from gdocs.managers.validation_manager import ValidationManager

logger = logging.getLogger(__name__)

validator = ValidationManager()


@dataclass
class TargetBody:
    """The part of a document an operation works on: the default body or one tab."""

    tree: ContentTree
    elements: List[StructuralElement]
    tab_id: Optional[str] = None
    tab_title: Optional[str] = None

    @property
    def document_end(self) -> int:
        return document_end_index(self.elements)

    @property
    def headings(self) -> List[HeadingRecord]:
        return find_headings(self.elements)


@dataclass
class EditResult:
    """Where new content landed: [start_index, end_index) after the batch was applied."""

    start_index: int
    end_index: int
    batch: BatchExecutionResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start_index,
            "end": self.end_index,
            **self.batch.to_dict(),
        }


def parse_style(style: Optional[Dict[str, Any]]) -> Optional[TextStyle]:
    """Turn a tool's style argument into a validated TextStyle (None when absent)."""
    try:
        text_style = TextStyle.from_dict(style)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(
            DocsErrorBuilder.invalid_param_value(
                "style", style, valid_values=list(TextStyle.__dataclass_fields__), detail=str(e)
            )
        )
    validator.validate_text_style(text_style)
    return text_style


async def resolve_target_body(
    gateway: DocsGateway, document_id: str, tab_id: Optional[str] = None
) -> TargetBody:
    """
    Fetch the document and narrow it to the requested tab.

    Args:
        gateway: The request's remote collaborator
        document_id: Document to read
        tab_id: Tab ID or title; None selects the default body

    Raises:
        NotFoundError: if the document or tab does not exist
    """
    validator.require_document_id(document_id)
    tree = await gateway.fetch_tree(document_id)
    if tab_id is None:
        return TargetBody(tree=tree, elements=tree.content)
    resolved = find_tab(tree, tab_id)
    return TargetBody(
        tree=tree, elements=resolved.content, tab_id=resolved.tab_id, tab_title=resolved.title
    )


async def _insert_blocks_at(
    gateway: DocsGateway,
    target: TargetBody,
    index: int,
    content: str,
    style: Optional[TextStyle],
    replace_until: Optional[int] = None,
) -> EditResult:
    """
    Insert Markdown content at index, optionally replacing [index, replace_until).

    Content landing at the end of the body takes over the body's trailing
    newline instead of adding an empty paragraph, and starts a new paragraph
    when the last one still holds text.
    """
    validator.require_text_content(content)
    document_end = target.document_end
    index = clamp_index(index, FIRST_INDEX, document_end)
    end = index if replace_until is None else clamp_index(replace_until, index, document_end)

    at_document_end = end >= document_end
    break_before = at_document_end and index == end and not ends_with_empty_paragraph(target.elements)

    blocks = parse_markdown(content)
    operations = plan_replacement(
        (index, end),
        blocks,
        target.tab_id,
        at_document_end=at_document_end,
        break_before=break_before,
    )

    content_start = index + 1 if break_before else index
    content_end = content_start + inserted_length(operations) - (1 if break_before else 0)
    styled_end = content_end if at_document_end else content_end - 1
    operations = overlay_text_style(operations, content_start, styled_end, style, target.tab_id)

    batch = await BatchOperationManager(gateway, validator).execute(
        target.tree.document_id, operations, document_end, target.tree.revision_id
    )
    return EditResult(content_start, content_end, batch)


async def read_as_markdown(gateway: DocsGateway, document_id: str, tab_id: Optional[str] = None) -> str:
    """Encode the document body (or one tab) as Markdown."""
    target = await resolve_target_body(gateway, document_id, tab_id)
    return to_markdown(target.elements)


async def write_markdown(
    gateway: DocsGateway, document_id: str, markdown: str, tab_id: Optional[str] = None
) -> BatchExecutionResult:
    """
    Replace the whole body (or one tab) with Markdown content.

    Not atomic: the body is cleared with one call and rewritten with a
    second. If the second call fails the body stays cleared.
    """
    validator.require_text_content(markdown)
    target = await resolve_target_body(gateway, document_id, tab_id)
    blocks = parse_markdown(markdown)
    return await BatchOperationManager(gateway, validator).rewrite(
        document_id,
        FIRST_INDEX,
        target.document_end,
        blocks,
        target.tab_id,
        target.tree.revision_id,
    )


async def find_document_headings(
    gateway: DocsGateway, document_id: str, tab_id: Optional[str] = None
) -> List[HeadingRecord]:
    target = await resolve_target_body(gateway, document_id, tab_id)
    return target.headings


async def insert_after_heading(
    gateway: DocsGateway,
    document_id: str,
    heading: str,
    content: str,
    style: Optional[TextStyle] = None,
    tab_id: Optional[str] = None,
) -> EditResult:
    """
    Insert Markdown content directly after a heading, at the start of its section.

    Raises:
        NotFoundError: if the heading does not exist; nothing is written
    """
    target = await resolve_target_body(gateway, document_id, tab_id)
    index = resolve_insert_after_heading(target.headings, heading, target.document_end)
    return await _insert_blocks_at(gateway, target, index, content, style)


async def append_to_section(
    gateway: DocsGateway,
    document_id: str,
    heading: str,
    content: str,
    style: Optional[TextStyle] = None,
    tab_id: Optional[str] = None,
) -> EditResult:
    """Insert Markdown content at the end of a section, right before the next heading."""
    target = await resolve_target_body(gateway, document_id, tab_id)
    index = resolve_append_to_section(target.headings, heading, target.document_end)
    return await _insert_blocks_at(gateway, target, index, content, style)


async def replace_section(
    gateway: DocsGateway,
    document_id: str,
    start_heading: str,
    new_content: str,
    end_heading: Optional[str] = None,
    preserve_heading: bool = True,
    style: Optional[TextStyle] = None,
    tab_id: Optional[str] = None,
) -> EditResult:
    """
    Replace a section with Markdown content.

    Args:
        start_heading: Heading that opens the section
        new_content: Markdown replacing the section
        end_heading: Optional later heading the replacement stops before
        preserve_heading: Keep start_heading and replace only the body under it
    """
    target = await resolve_target_body(gateway, document_id, tab_id)
    start, end = resolve_section_replacement(
        target.headings,
        start_heading,
        target.document_end,
        end_heading=end_heading,
        preserve_heading=preserve_heading,
    )
    return await _insert_blocks_at(gateway, target, start, new_content, style, replace_until=end)


async def get_style_at(
    gateway: DocsGateway,
    document_id: str,
    start_index: int,
    end_index: Optional[int] = None,
    tab_id: Optional[str] = None,
) -> List[StyledRange]:
    """
    Text styles of the runs covering [start_index, end_index).

    end_index defaults to start_index + 1 (the single character at start_index).
    """
    target = await resolve_target_body(gateway, document_id, tab_id)
    if end_index is None:
        end_index = start_index + 1
    validator.check_range(start_index, end_index, target.document_end)
    return find_styles_in_range(target.elements, start_index, end_index)


async def apply_text_style(
    gateway: DocsGateway,
    document_id: str,
    start_index: int,
    end_index: int,
    style: TextStyle,
    tab_id: Optional[str] = None,
) -> EditResult:
    """
    Apply a text style to an existing range.

    Indices are clamped to the body first; a range that is still empty or
    inverted is rejected before any call is made.
    """
    if style is None or style.is_empty():
        raise InvalidParameterError(
            DocsErrorBuilder.invalid_param_value("style", style, detail="at least one style attribute is required")
        )
    target = await resolve_target_body(gateway, document_id, tab_id)
    document_end = target.document_end
    start = clamp_index(start_index, FIRST_INDEX, document_end)
    end = clamp_index(end_index, FIRST_INDEX, document_end + 1)
    validator.check_range(start, end, document_end)

    operations = overlay_text_style([], start, end, style, target.tab_id)
    batch = await BatchOperationManager(gateway, validator).execute(
        document_id, operations, document_end, target.tree.revision_id
    )
    return EditResult(start, end, batch)


async def read_document_text(
    gateway: DocsGateway, document_id: str, tab_id: Optional[str] = None
) -> TargetBody:
    """Fetch the body (or one tab); callers render it with extract_text."""
    return await resolve_target_body(gateway, document_id, tab_id)


async def list_document_tabs(gateway: DocsGateway, document_id: str) -> List[Tab]:
    validator.require_document_id(document_id)
    return await gateway.list_tabs(document_id)


async def create_document(gateway: DocsGateway, title: str, content: str = "") -> str:
    """Create a document and, when content is given, write it as Markdown."""
    document_id = await gateway.create_document(title)
    logger.info(f"Created document '{title}' (ID: {document_id})")
    if content:
        validator.require_text_content(content)
        # A new document is a single empty paragraph: its trailing newline sits at index 1
        operations = plan_insertion(parse_markdown(content), FIRST_INDEX, at_document_end=True)
        await BatchOperationManager(gateway, validator).execute(document_id, operations, FIRST_INDEX)
    return document_id


async def update_document(
    gateway: DocsGateway,
    document_id: str,
    content: str,
    replace_all: bool = False,
    tab_id: Optional[str] = None,
) -> BatchExecutionResult:
    """
    Append plain text to the end of the body, or replace the whole body with it.

    The text is inserted verbatim, without Markdown interpretation. A full
    replacement clears and inserts in two separate calls.
    """
    validator.require_text_content(content)
    target = await resolve_target_body(gateway, document_id, tab_id)
    manager = BatchOperationManager(gateway, validator)
    document_end = target.document_end
    revision_id = target.tree.revision_id

    if replace_all:
        if document_end > FIRST_INDEX:
            cleared = await manager.execute(
                document_id,
                [DeleteRange(FIRST_INDEX, document_end, target.tab_id)],
                document_end,
                revision_id,
            )
            revision_id = cleared.revision_id
            document_end = FIRST_INDEX
        index = FIRST_INDEX
    else:
        index = document_end

    operations = [InsertText(index, content, target.tab_id)] if content else []
    return await manager.execute(document_id, operations, document_end, revision_id)


async def search_documents(
    gateway: DocsGateway, query: str, page_size: int = 10
) -> List[DocumentSummary]:
    return await gateway.search_documents(query, page_size)


async def list_documents(gateway: DocsGateway, page_size: int = 50) -> List[DocumentSummary]:
    return await gateway.list_documents(page_size)


async def delete_document(gateway: DocsGateway, document_id: str) -> str:
    """Delete a document, returning its title for confirmation."""
    validator.require_document_id(document_id)
    tree = await gateway.fetch_tree(document_id)
    await gateway.delete_document(document_id)
    logger.info(f"Deleted document '{tree.title}' (ID: {document_id})")
    return tree.title


def body_text(target: TargetBody) -> str:
    return extract_text(target.elements)[0]
