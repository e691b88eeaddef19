"""
Unit tests for DocsGateway against mocked Docs and Drive API clients.
"""

from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from doc_builders import SAMPLE_PARAGRAPHS, create_mock_doc, create_mock_tab
from gdocs.docs_gateway import DocsGateway, DocumentSummary
from gdocs.docs_helpers import InsertText
from gdocs.errors import ErrorCode, NotFoundError, RemoteRejectedError


def make_http_error(status: int, content: bytes = b"error") -> HttpError:
    mock_resp = MagicMock()
    mock_resp.status = status
    mock_resp.reason = "Error"
    return HttpError(mock_resp, content)


def make_docs_service(doc_data=None, batch_response=None, error=None):
    service = MagicMock()
    documents = service.documents.return_value
    if error is not None:
        documents.get.return_value.execute.side_effect = error
        documents.batchUpdate.return_value.execute.side_effect = error
    else:
        documents.get.return_value.execute.return_value = doc_data
        documents.batchUpdate.return_value.execute.return_value = batch_response or {}
    documents.create.return_value.execute.return_value = {"documentId": "created-1"}
    return service


class TestFetchTree:
    @pytest.mark.asyncio
    async def test_fetches_with_tabs(self):
        service = make_docs_service(create_mock_doc(SAMPLE_PARAGRAPHS))

        tree = await DocsGateway(service).fetch_tree("doc-123")

        service.documents.return_value.get.assert_called_once_with(
            documentId="doc-123", includeTabsContent=True
        )
        assert tree.title == "Test Doc"
        assert tree.revision_id == "rev-1"
        assert len(tree.content) == 7

    @pytest.mark.asyncio
    async def test_missing_document_id_in_payload(self):
        doc = create_mock_doc([])
        del doc["documentId"]

        tree = await DocsGateway(make_docs_service(doc)).fetch_tree("doc-9")

        assert tree.document_id == "doc-9"

    @pytest.mark.asyncio
    async def test_404_is_not_found(self):
        gateway = DocsGateway(make_docs_service(error=make_http_error(404)))

        with pytest.raises(NotFoundError) as exc_info:
            await gateway.fetch_tree("gone")

        assert exc_info.value.code == ErrorCode.DOCUMENT_NOT_FOUND.value

    @pytest.mark.asyncio
    async def test_other_http_errors_propagate(self):
        gateway = DocsGateway(make_docs_service(error=make_http_error(500)))

        with pytest.raises(HttpError):
            await gateway.fetch_tree("doc")


class TestApplyEdits:
    @pytest.mark.asyncio
    async def test_sends_requests(self):
        service = make_docs_service(
            batch_response={"writeControl": {"requiredRevisionId": "rev-7"}}
        )

        revision = await DocsGateway(service).apply_edits("doc", [InsertText(1, "hi", "t.1")], "rev-6")

        body = service.documents.return_value.batchUpdate.call_args.kwargs["body"]
        assert body == {
            "requests": [{"insertText": {"location": {"index": 1, "tabId": "t.1"}, "text": "hi"}}]
        }
        assert revision == "rev-7"

    @pytest.mark.asyncio
    async def test_revision_match_sends_write_control(self):
        service = make_docs_service()
        gateway = DocsGateway(service, require_revision_match=True)

        await gateway.apply_edits("doc", [InsertText(1, "hi")], "rev-6")

        body = service.documents.return_value.batchUpdate.call_args.kwargs["body"]
        assert body["writeControl"] == {"requiredRevisionId": "rev-6"}

    @pytest.mark.asyncio
    async def test_nothing_to_send(self):
        service = make_docs_service()

        revision = await DocsGateway(service).apply_edits("doc", [], "rev-1")

        service.documents.return_value.batchUpdate.assert_not_called()
        assert revision == "rev-1"

    @pytest.mark.asyncio
    async def test_rejection_carries_index_and_service_error(self):
        error = make_http_error(400, b"Index 99 must be less than the end index")
        gateway = DocsGateway(make_docs_service(error=error))

        with pytest.raises(RemoteRejectedError) as exc_info:
            await gateway.apply_edits("doc", [InsertText(99, "x")])

        context = exc_info.value.structured.context
        assert exc_info.value.code == ErrorCode.REMOTE_REJECTED.value
        assert context.document_id == "doc"
        assert context.attempted_index == 99
        assert "Index 99" in context.service_error


class TestTabsAndDrive:
    @pytest.mark.asyncio
    async def test_list_tabs_flattens_children(self):
        doc = {
            "documentId": "doc",
            "tabs": [
                create_mock_tab("t.0", "Main", [], child_tabs=[create_mock_tab("t.1", "Child", [])]),
                create_mock_tab("t.2", "Other", []),
            ],
        }

        tabs = await DocsGateway(make_docs_service(doc)).list_tabs("doc")

        assert [t.tab_id for t in tabs] == ["t.0", "t.1", "t.2"]

    @pytest.mark.asyncio
    async def test_create_document(self):
        service = make_docs_service()

        document_id = await DocsGateway(service).create_document("Plan")

        service.documents.return_value.create.assert_called_once_with(body={"title": "Plan"})
        assert document_id == "created-1"

    @pytest.mark.asyncio
    async def test_search_escapes_query(self):
        drive = MagicMock()
        drive.files.return_value.list.return_value.execute.return_value = {
            "files": [{"id": "d1", "name": "Q3 plan", "modifiedTime": "2024-01-01"}]
        }

        results = await DocsGateway(MagicMock(), drive).search_documents("bob's plan", 5)

        kwargs = drive.files.return_value.list.call_args.kwargs
        assert "name contains 'bob\\'s plan'" in kwargs["q"]
        assert "fullText contains" in kwargs["q"]
        assert kwargs["pageSize"] == 5
        assert results == [DocumentSummary("d1", "Q3 plan", modified_time="2024-01-01")]

    @pytest.mark.asyncio
    async def test_delete_document(self):
        drive = MagicMock()

        await DocsGateway(MagicMock(), drive).delete_document("d1")

        drive.files.return_value.delete.assert_called_once_with(fileId="d1", supportsAllDrives=True)

    @pytest.mark.asyncio
    async def test_drive_calls_need_a_drive_service(self):
        with pytest.raises(RuntimeError):
            await DocsGateway(MagicMock()).list_documents()

    def test_summary_to_dict_skips_missing_fields(self):
        summary = DocumentSummary("d1", "Title", web_view_link="https://x")
        assert summary.to_dict() == {"document_id": "d1", "title": "Title", "web_view_link": "https://x"}
