"""
Google Docs MCP resources and prompts.

Resources expose the user's documents by URI (googledocs://list and
googledocs://{document_id}); prompts are ready-made requests that drive the
Docs tools.
"""

import logging

from auth.service_decorator import get_docs_gateway
from core.server import server
from core.utils import handle_http_errors

from gdocs import docs_operations
from gdocs.docs_markdown import to_markdown

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 50


@server.resource("googledocs://list", name="list_docs", mime_type="text/plain")
@handle_http_errors("list_docs", is_read_only=True, service_type="docs")
async def list_docs_resource() -> str:
    """Google Docs in the user's Drive, most recent listing from the Drive API."""
    gateway = await get_docs_gateway("drive_read")
    documents = await docs_operations.list_documents(gateway, LIST_PAGE_SIZE)

    lines = ["Google Docs in your Drive:", ""]
    if not documents:
        lines.append("No Google Docs found.")
    for doc in documents:
        lines.extend(
            [
                f"Title: {doc.title}",
                f"ID: {doc.document_id}",
                f"Created: {doc.created_time}",
                f"Last Modified: {doc.modified_time}",
                "",
            ]
        )
    return "\n".join(lines)


@server.resource("googledocs://{document_id}", name="get_doc", mime_type="text/markdown")
@handle_http_errors("get_doc", is_read_only=True, service_type="docs")
async def get_doc_resource(document_id: str) -> str:
    """One Google Doc rendered as Markdown."""
    logger.info(f"[get_doc] Invoked. Document ID: '{document_id}'")
    gateway = await get_docs_gateway("docs_read")
    target = await docs_operations.resolve_target_body(gateway, document_id)
    return f"Document: {target.tree.title}\n\n{to_markdown(target.elements)}"


@server.prompt(name="create_doc_template")
def create_doc_template(title: str, subject: str, style: str) -> str:
    """Ask for a new, well-structured document on a subject."""
    return (
        f'Please create a Google Doc with the title "{title}" about {subject} in a {style} '
        "writing style. Make sure it's well-structured with an introduction, main sections, "
        "and a conclusion. Write it with create_doc, using Markdown headings for the sections."
    )


@server.prompt(name="analyze_doc")
def analyze_doc(document_id: str) -> str:
    """Ask for a summary and review of a document."""
    return (
        f"Please analyze the content of the document with ID {document_id}. "
        "Provide a summary of its content, structure, key points, and any suggestions "
        "for improvement. Use read_doc_as_markdown and find_doc_headings to read it."
    )


@server.prompt(name="analyze_doc_tab")
def analyze_doc_tab(document_id: str, tab_name: str) -> str:
    """Ask for a summary and review of one tab of a document."""
    return (
        f'Please analyze the content of the tab "{tab_name}" in the document with ID '
        f"{document_id}. Provide a summary of the tab's content, key points, and any "
        "suggestions for improvement specific to this tab."
    )
