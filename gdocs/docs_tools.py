"""
Google Docs MCP Tools

This module provides MCP tools for reading Google Docs as Markdown, writing
Markdown into them, and editing them relative to their headings.
"""

import logging
from typing import Any, Dict, Optional

from auth.service_decorator import require_docs_gateway
from core.config import DOCS_SEARCH_PAGE_SIZE
from core.server import server
from core.utils import handle_http_errors, to_json

from gdocs import docs_operations
from gdocs.docs_gateway import DocsGateway
from gdocs.docs_helpers import document_link

logger = logging.getLogger(__name__)


@server.tool()
@handle_http_errors("read_doc_as_markdown", is_read_only=True, service_type="docs")
@require_docs_gateway("docs_read")
async def read_doc_as_markdown(
    gateway: DocsGateway,
    document_id: str,
    tab_id: Optional[str] = None,
) -> str:
    """
    Reads a Google Doc and returns its content as Markdown.

    Headings become '#' lines (HEADING_1 is '#', HEADING_6 is '######').
    Inline formatting is not carried over; only the text is kept. Tables are
    replaced with a placeholder comment.

    Args:
        document_id: ID of the document
        tab_id: Optional tab ID or tab title. Defaults to the main body.

    Returns:
        str: The document as Markdown.
    """
    logger.info(f"[read_doc_as_markdown] Invoked. Document ID: '{document_id}', Tab: {tab_id}")
    return await docs_operations.read_as_markdown(gateway, document_id, tab_id)


@server.tool()
@handle_http_errors("write_doc_markdown", service_type="docs")
@require_docs_gateway("docs_write")
async def write_doc_markdown(
    gateway: DocsGateway,
    document_id: str,
    markdown: str,
    tab_id: Optional[str] = None,
) -> str:
    """
    Replaces the entire content of a Google Doc (or one tab) with Markdown.

    Supports '#'..'######' headings and inline **bold**, *italic*,
    ~~strikethrough~~ and `code`. The document is cleared and rewritten in two
    steps; if the second step fails the document is left empty and the write
    should be retried.

    Args:
        document_id: ID of the document
        markdown: Markdown content for the whole document
        tab_id: Optional tab ID or tab title

    Returns:
        str: JSON summary of the applied edits.
    """
    logger.info(f"[write_doc_markdown] Invoked. Document ID: '{document_id}', Tab: {tab_id}")
    result = await docs_operations.write_markdown(gateway, document_id, markdown, tab_id)
    return to_json(result.to_dict())


@server.tool()
@handle_http_errors("find_doc_headings", is_read_only=True, service_type="docs")
@require_docs_gateway("docs_read")
async def find_doc_headings(
    gateway: DocsGateway,
    document_id: str,
    tab_id: Optional[str] = None,
) -> str:
    """
    Lists the headings of a Google Doc with their levels and index ranges.

    Use this to discover heading names for insert_after_heading,
    append_to_section and replace_doc_section.

    Args:
        document_id: ID of the document
        tab_id: Optional tab ID or tab title

    Returns:
        str: JSON with a 'headings' array of {level, text, start_index, end_index}.
    """
    logger.info(f"[find_doc_headings] Invoked. Document ID: '{document_id}'")
    headings = await docs_operations.find_document_headings(gateway, document_id, tab_id)
    return to_json(
        {
            "document_id": document_id,
            "count": len(headings),
            "headings": [heading.to_dict() for heading in headings],
        }
    )


@server.tool()
@handle_http_errors("insert_after_heading", service_type="docs")
@require_docs_gateway("docs_write")
async def insert_after_heading(
    gateway: DocsGateway,
    document_id: str,
    heading: str,
    content: str,
    style: Optional[Dict[str, Any]] = None,
    tab_id: Optional[str] = None,
) -> str:
    """
    Inserts Markdown content directly below a heading.

    Heading matching ignores case and surrounding whitespace; the first match wins.

    Args:
        document_id: ID of the document
        heading: Text of the heading to insert under
        content: Markdown content to insert
        style: Optional text style for the whole inserted content, e.g.
            {"bold": true, "foreground_color": "#FF0000", "font_size": 12}
        tab_id: Optional tab ID or tab title

    Returns:
        str: JSON with the index where the content was inserted and its range.
    """
    logger.info(
        f"[insert_after_heading] Invoked. Document ID: '{document_id}', Heading: '{heading}'"
    )
    text_style = docs_operations.parse_style(style)
    result = await docs_operations.insert_after_heading(
        gateway, document_id, heading, content, text_style, tab_id
    )
    return to_json({"inserted_at": result.start_index, **result.to_dict()})


@server.tool()
@handle_http_errors("replace_doc_section", service_type="docs")
@require_docs_gateway("docs_write")
async def replace_doc_section(
    gateway: DocsGateway,
    document_id: str,
    start_heading: str,
    new_content: str,
    end_heading: Optional[str] = None,
    preserve_heading: bool = True,
    style: Optional[Dict[str, Any]] = None,
    tab_id: Optional[str] = None,
) -> str:
    """
    Replaces the content of a section with Markdown.

    The section runs from start_heading to the next heading (or to end_heading
    when given, or to the end of the document).

    Args:
        document_id: ID of the document
        start_heading: Heading that opens the section
        new_content: Markdown replacing the section
        end_heading: Optional later heading to stop before (it is kept)
        preserve_heading: Keep start_heading itself and replace only the text under it
        style: Optional text style applied to the new content
        tab_id: Optional tab ID or tab title

    Returns:
        str: JSON with the start and end index of the new content.
    """
    logger.info(
        f"[replace_doc_section] Invoked. Document ID: '{document_id}', "
        f"Section: '{start_heading}' -> '{end_heading}', preserve_heading={preserve_heading}"
    )
    text_style = docs_operations.parse_style(style)
    result = await docs_operations.replace_section(
        gateway,
        document_id,
        start_heading,
        new_content,
        end_heading=end_heading,
        preserve_heading=preserve_heading,
        style=text_style,
        tab_id=tab_id,
    )
    return to_json(result.to_dict())


@server.tool()
@handle_http_errors("append_to_section", service_type="docs")
@require_docs_gateway("docs_write")
async def append_to_section(
    gateway: DocsGateway,
    document_id: str,
    section_heading: str,
    content: str,
    style: Optional[Dict[str, Any]] = None,
    tab_id: Optional[str] = None,
) -> str:
    """
    Appends Markdown content at the end of a section, just before the next heading.

    Args:
        document_id: ID of the document
        section_heading: Heading of the section to append to
        content: Markdown content to append
        style: Optional text style applied to the appended content
        tab_id: Optional tab ID or tab title

    Returns:
        str: JSON with the index where the content was inserted and its range.
    """
    logger.info(
        f"[append_to_section] Invoked. Document ID: '{document_id}', Section: '{section_heading}'"
    )
    text_style = docs_operations.parse_style(style)
    result = await docs_operations.append_to_section(
        gateway, document_id, section_heading, content, text_style, tab_id
    )
    return to_json({"inserted_at": result.start_index, **result.to_dict()})


@server.tool()
@handle_http_errors("get_text_style", is_read_only=True, service_type="docs")
@require_docs_gateway("docs_read")
async def get_text_style(
    gateway: DocsGateway,
    document_id: str,
    start_index: int,
    end_index: Optional[int] = None,
    tab_id: Optional[str] = None,
) -> str:
    """
    Returns the text styles in effect over a character range.

    Args:
        document_id: ID of the document
        start_index: First index of the range (1-based)
        end_index: End of the range, exclusive. Defaults to start_index + 1.
        tab_id: Optional tab ID or tab title

    Returns:
        str: JSON array of {range: {start, end}, style, text}, one per text run.
    """
    logger.info(
        f"[get_text_style] Invoked. Document ID: '{document_id}', Range: {start_index}-{end_index}"
    )
    ranges = await docs_operations.get_style_at(gateway, document_id, start_index, end_index, tab_id)
    return to_json([styled.to_dict() for styled in ranges])


@server.tool()
@handle_http_errors("format_doc_text", service_type="docs")
@require_docs_gateway("docs_write")
async def format_doc_text(
    gateway: DocsGateway,
    document_id: str,
    start_index: int,
    end_index: int,
    bold: Optional[bool] = None,
    italic: Optional[bool] = None,
    underline: Optional[bool] = None,
    strikethrough: Optional[bool] = None,
    font_size: Optional[float] = None,
    font_family: Optional[str] = None,
    foreground_color: Optional[str] = None,
    background_color: Optional[str] = None,
    tab_id: Optional[str] = None,
) -> str:
    """
    Applies text formatting to an existing range of a Google Doc.

    Only the attributes that are passed are changed. Indices outside the
    document are clamped to it.

    Args:
        document_id: ID of the document
        start_index: Start of the range (1-based)
        end_index: End of the range, exclusive
        bold: Bold on/off
        italic: Italic on/off
        underline: Underline on/off
        strikethrough: Strikethrough on/off
        font_size: Font size in points (1-400)
        font_family: Font family name, e.g. "Arial"
        foreground_color: Text color as '#RRGGBB' or a named color
        background_color: Highlight color as '#RRGGBB' or a named color
        tab_id: Optional tab ID or tab title

    Returns:
        str: Confirmation with the formatted range.
    """
    logger.info(
        f"[format_doc_text] Invoked. Document ID: '{document_id}', Range: {start_index}-{end_index}"
    )
    style = docs_operations.parse_style(
        {
            name: value
            for name, value in {
                "bold": bold,
                "italic": italic,
                "underline": underline,
                "strikethrough": strikethrough,
                "font_size": font_size,
                "font_family": font_family,
                "foreground_color": foreground_color,
                "background_color": background_color,
            }.items()
            if value is not None
        }
    )
    result = await docs_operations.apply_text_style(
        gateway, document_id, start_index, end_index, style, tab_id
    )
    applied = ", ".join(f"{k}={v}" for k, v in style.to_dict().items())
    return (
        f"Formatted range {result.start_index}-{result.end_index} in document {document_id} "
        f"({applied}). Link: {document_link(document_id)}"
    )


@server.tool()
@handle_http_errors("read_doc", is_read_only=True, service_type="docs")
@require_docs_gateway("docs_read")
async def read_doc(
    gateway: DocsGateway,
    document_id: str,
    tab_id: Optional[str] = None,
) -> str:
    """
    Reads the plain text of a Google Doc (or one tab).

    Args:
        document_id: ID of the document
        tab_id: Optional tab ID or tab title

    Returns:
        str: The document text with a metadata header.
    """
    logger.info(f"[read_doc] Invoked. Document ID: '{document_id}', Tab: {tab_id}")
    target = await docs_operations.read_document_text(gateway, document_id, tab_id)
    header = f'File: "{target.tree.title}" (ID: {document_id})'
    if target.tab_title:
        header += f'\nTab: "{target.tab_title}" (ID: {target.tab_id})'
    header += f"\nLink: {document_link(document_id)}"
    return f"{header}\n\n--- CONTENT ---\n{docs_operations.body_text(target)}"


@server.tool()
@handle_http_errors("list_doc_tabs", is_read_only=True, service_type="docs")
@require_docs_gateway("docs_read")
async def list_doc_tabs(
    gateway: DocsGateway,
    document_id: str,
) -> str:
    """
    Lists the tabs of a Google Doc, including nested child tabs.

    Args:
        document_id: ID of the document

    Returns:
        str: JSON array of {tab_id, title, nesting_level}.
    """
    logger.info(f"[list_doc_tabs] Invoked. Document ID: '{document_id}'")
    tabs = await docs_operations.list_document_tabs(gateway, document_id)
    return to_json(
        [
            {"tab_id": tab.tab_id, "title": tab.title, "nesting_level": tab.nesting_level}
            for tab in tabs
        ]
    )


@server.tool()
@handle_http_errors("create_doc", service_type="docs")
@require_docs_gateway("docs_write")
async def create_doc(
    gateway: DocsGateway,
    title: str,
    content: str = "",
) -> str:
    """
    Creates a new Google Doc, optionally filled with Markdown content.

    Args:
        title: Title of the new document
        content: Optional Markdown content for the document body

    Returns:
        str: Confirmation message with document ID and link.
    """
    logger.info(f"[create_doc] Invoked. Title='{title}'")
    document_id = await docs_operations.create_document(gateway, title, content)
    return f"Created Google Doc '{title}' (ID: {document_id}). Link: {document_link(document_id)}"


@server.tool()
@handle_http_errors("update_doc", service_type="docs")
@require_docs_gateway("docs_write")
async def update_doc(
    gateway: DocsGateway,
    document_id: str,
    content: str,
    replace_all: bool = False,
    tab_id: Optional[str] = None,
) -> str:
    """
    Appends plain text to a Google Doc, or replaces its whole content with it.

    The text is inserted as-is; use write_doc_markdown for formatted content.

    Args:
        document_id: ID of the document
        content: Text to add
        replace_all: Replace the entire content instead of appending
        tab_id: Optional tab ID or tab title

    Returns:
        str: Confirmation message with the document link.
    """
    logger.info(
        f"[update_doc] Invoked. Document ID: '{document_id}', replace_all={replace_all}"
    )
    await docs_operations.update_document(gateway, document_id, content, replace_all, tab_id)
    action = "Replaced content of" if replace_all else "Appended text to"
    return f"{action} document {document_id}. Link: {document_link(document_id)}"


@server.tool()
@handle_http_errors("search_docs", is_read_only=True, service_type="docs")
@require_docs_gateway("drive_read")
async def search_docs(
    gateway: DocsGateway,
    query: str,
    page_size: Optional[int] = None,
) -> str:
    """
    Searches for Google Docs by title or content.

    Args:
        query: Text to look for in document names and bodies
        page_size: Maximum number of results

    Returns:
        str: A formatted list of Google Docs matching the search query.
    """
    logger.info(f"[search_docs] Invoked. Query='{query}'")
    documents = await docs_operations.search_documents(
        gateway, query, page_size or DOCS_SEARCH_PAGE_SIZE
    )
    if not documents:
        return f"No Google Docs found matching '{query}'."

    output = [f"Found {len(documents)} Google Docs matching '{query}':"]
    for doc in documents:
        output.append(
            f"- {doc.title} (ID: {doc.document_id}) Modified: {doc.modified_time} Link: {doc.web_view_link}"
        )
    return "\n".join(output)


@server.tool()
@handle_http_errors("delete_doc", service_type="docs")
@require_docs_gateway("docs_read", "drive")
async def delete_doc(
    gateway: DocsGateway,
    document_id: str,
) -> str:
    """
    Permanently deletes a Google Doc.

    Args:
        document_id: ID of the document to delete

    Returns:
        str: Confirmation message with the deleted document's title.
    """
    logger.info(f"[delete_doc] Invoked. Document ID: '{document_id}'")
    title = await docs_operations.delete_document(gateway, document_id)
    return f"Deleted Google Doc '{title}' (ID: {document_id})."
