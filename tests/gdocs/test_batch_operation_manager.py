"""
Unit tests for BatchOperationManager: validated execution and the two-step rewrite.
"""

import pytest

from doc_builders import FakeDocsGateway, apply_to_text
from gdocs.docs_helpers import DeleteRange, InsertText, SetParagraphStyle
from gdocs.docs_markdown import parse_markdown
from gdocs.errors import InvalidRangeError, RemoteRejectedError
from gdocs.managers.batch_operation_manager import BatchOperationManager


class TestExecute:
    @pytest.mark.asyncio
    async def test_applies_batch(self):
        gateway = FakeDocsGateway()
        manager = BatchOperationManager(gateway)
        ops = [InsertText(5, "hello\n"), SetParagraphStyle(5, 11, "NORMAL_TEXT")]

        result = await manager.execute("doc-1", ops, 10, "rev-1")

        assert gateway.batches == [ops]
        assert gateway.batch_revisions == ["rev-1"]
        assert result.success
        assert result.total_operations == 2
        assert result.total_position_shift == 6
        assert result.revision_id == "rev-2"
        assert result.document_link == "https://docs.google.com/document/d/doc-1/edit"
        assert "1 insert_text" in result.message

    @pytest.mark.asyncio
    async def test_invalid_batch_is_never_sent(self):
        gateway = FakeDocsGateway()
        manager = BatchOperationManager(gateway)

        with pytest.raises(InvalidRangeError):
            await manager.execute("doc-1", [InsertText(50, "x")], 10)

        assert gateway.batches == []

    @pytest.mark.asyncio
    async def test_empty_batch_is_not_sent(self):
        gateway = FakeDocsGateway()

        result = await BatchOperationManager(gateway).execute("doc-1", [], 10, "rev-1")

        assert gateway.batches == []
        assert result.total_operations == 0
        assert result.revision_id == "rev-1"

    @pytest.mark.asyncio
    async def test_remote_rejection_propagates(self):
        gateway = FakeDocsGateway(reject_batch=1)

        with pytest.raises(RemoteRejectedError):
            await BatchOperationManager(gateway).execute("doc-1", [InsertText(1, "x")], 10)


class TestRewrite:
    @pytest.mark.asyncio
    async def test_clears_then_inserts_in_two_batches(self):
        gateway = FakeDocsGateway()
        blocks = parse_markdown("# Title\nBody")

        result = await BatchOperationManager(gateway).rewrite("doc-1", 1, 20, blocks, revision_id="rev-1")

        assert len(gateway.batches) == 2
        assert gateway.batches[0] == [DeleteRange(1, 20)]
        assert gateway.batch_revisions == ["rev-1", "rev-2"]
        assert apply_to_text("\n", gateway.batches[1]) == "Title\nBody\n"
        assert result.revision_id == "rev-3"

    @pytest.mark.asyncio
    async def test_empty_document_skips_the_clear(self):
        gateway = FakeDocsGateway()

        await BatchOperationManager(gateway).rewrite("doc-1", 1, 1, parse_markdown("Hi"))

        assert len(gateway.batches) == 1
        assert gateway.batches[0][0] == InsertText(1, "Hi")

    @pytest.mark.asyncio
    async def test_failed_insert_leaves_document_cleared(self):
        gateway = FakeDocsGateway(reject_batch=2)

        with pytest.raises(RemoteRejectedError):
            await BatchOperationManager(gateway).rewrite("doc-1", 1, 20, parse_markdown("Text"))

        assert len(gateway.batches) == 2
        assert gateway.batches[0] == [DeleteRange(1, 20)]

    @pytest.mark.asyncio
    async def test_tab_id_on_both_batches(self):
        gateway = FakeDocsGateway()

        await BatchOperationManager(gateway).rewrite("doc-1", 1, 5, parse_markdown("x"), tab_id="t.2")

        assert all(op.tab_id == "t.2" for op in gateway.all_operations)
