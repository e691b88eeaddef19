"""
Google Docs remote collaborator.

DocsGateway wraps the Docs and Drive API clients for one request. It is built
per tool call by auth.service_decorator.require_docs_gateway and passed
explicitly to the operations in gdocs.docs_operations, so tests can swap in a
fake with the same coroutine methods.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from googleapiclient.errors import HttpError

from gdocs.docs_helpers import EditOperation, build_requests, first_index
from gdocs.docs_model import ContentTree, Tab, parse_document
from gdocs.docs_structure import iter_tabs
from gdocs.errors import DocsErrorBuilder, NotFoundError, RemoteRejectedError

logger = logging.getLogger(__name__)

GOOGLE_DOCS_MIME_TYPE = "application/vnd.google-apps.document"


@dataclass(frozen=True)
class DocumentSummary:
    document_id: str
    title: str
    created_time: Optional[str] = None
    modified_time: Optional[str] = None
    web_view_link: Optional[str] = None

    @classmethod
    def from_drive_file(cls, drive_file: Dict[str, Any]) -> "DocumentSummary":
        return cls(
            document_id=drive_file["id"],
            title=drive_file.get("name", ""),
            created_time=drive_file.get("createdTime"),
            modified_time=drive_file.get("modifiedTime"),
            web_view_link=drive_file.get("webViewLink"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def _escape_query(query: str) -> str:
    return query.replace("\\", "\\\\").replace("'", "\\'")


class DocsGateway:
    """Per-request access to one user's Google Docs and Drive."""

    def __init__(
        self,
        docs_service: Any,
        drive_service: Any = None,
        require_revision_match: bool = False,
    ):
        self.docs_service = docs_service
        self.drive_service = drive_service
        self.require_revision_match = require_revision_match

    async def fetch_tree(self, document_id: str) -> ContentTree:
        """Fetch a fresh snapshot of the document, including every tab's content."""
        try:
            doc_data = await asyncio.to_thread(
                self.docs_service.documents()
                .get(documentId=document_id, includeTabsContent=True)
                .execute
            )
        except HttpError as error:
            if error.resp.status == 404:
                raise NotFoundError(DocsErrorBuilder.document_not_found(document_id)) from error
            raise

        tree = parse_document(doc_data)
        if not tree.document_id:
            tree.document_id = document_id
        logger.debug(
            f"Fetched document '{document_id}' (revision {tree.revision_id}, {len(tree.tabs)} tabs)"
        )
        return tree

    async def apply_edits(
        self,
        document_id: str,
        operations: List[EditOperation],
        required_revision_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Apply a batch atomically with one documents.batchUpdate call.

        Args:
            document_id: Target document
            operations: Ordered edit operations; tab targeting is carried per operation
            required_revision_id: Revision the batch was planned against. Only
                enforced when the gateway was built with require_revision_match.

        Returns:
            The document revision after the batch, when the API reports it

        Raises:
            RemoteRejectedError: if the API refuses the batch
        """
        requests = build_requests(operations)
        if not requests:
            return required_revision_id

        body: Dict[str, Any] = {"requests": requests}
        if self.require_revision_match and required_revision_id:
            body["writeControl"] = {"requiredRevisionId": required_revision_id}

        try:
            response = await asyncio.to_thread(
                self.docs_service.documents()
                .batchUpdate(documentId=document_id, body=body)
                .execute
            )
        except HttpError as error:
            if error.resp.status == 404:
                raise NotFoundError(DocsErrorBuilder.document_not_found(document_id)) from error
            logger.error(
                f"batchUpdate rejected for document '{document_id}': {error}", exc_info=True
            )
            raise RemoteRejectedError(
                DocsErrorBuilder.remote_rejected(
                    document_id, first_index(operations), str(error), len(requests)
                )
            ) from error

        logger.info(f"Applied {len(requests)} requests to document '{document_id}'")
        return response.get("writeControl", {}).get("requiredRevisionId")

    async def list_tabs(self, document_id: str) -> List[Tab]:
        tree = await self.fetch_tree(document_id)
        return list(iter_tabs(tree.tabs))

    async def create_document(self, title: str) -> str:
        doc = await asyncio.to_thread(
            self.docs_service.documents().create(body={"title": title}).execute
        )
        return doc["documentId"]

    async def delete_document(self, document_id: str) -> None:
        try:
            await asyncio.to_thread(
                self._drive().files().delete(fileId=document_id, supportsAllDrives=True).execute
            )
        except HttpError as error:
            if error.resp.status == 404:
                raise NotFoundError(DocsErrorBuilder.document_not_found(document_id)) from error
            raise

    async def search_documents(self, query: str, page_size: int = 10) -> List[DocumentSummary]:
        escaped = _escape_query(query)
        return await self._list_files(
            f"mimeType='{GOOGLE_DOCS_MIME_TYPE}' and trashed=false and "
            f"(name contains '{escaped}' or fullText contains '{escaped}')",
            page_size,
        )

    async def list_documents(self, page_size: int = 50) -> List[DocumentSummary]:
        return await self._list_files(
            f"mimeType='{GOOGLE_DOCS_MIME_TYPE}' and trashed=false", page_size
        )

    async def _list_files(self, query: str, page_size: int) -> List[DocumentSummary]:
        response = await asyncio.to_thread(
            self._drive()
            .files()
            .list(
                q=query,
                pageSize=page_size,
                fields="files(id, name, createdTime, modifiedTime, webViewLink)",
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
                corpora="allDrives",
            )
            .execute
        )
        return [DocumentSummary.from_drive_file(f) for f in response.get("files", [])]

    def _drive(self) -> Any:
        if self.drive_service is None:
            raise RuntimeError("This gateway was built without a Drive service")
        return self.drive_service
