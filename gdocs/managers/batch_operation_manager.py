"""
Batch Operation Manager

This module validates planned edit batches and submits them through the
request's DocsGateway.

Features:
- Atomic batch execution (all operations succeed or all fail)
- Bounds validation before anything is sent
- Whole-body rewrite as two round trips: clear, then insert
"""
import logging
from collections import Counter
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

from gdocs.docs_gateway import DocsGateway
from gdocs.docs_helpers import (
    DeleteRange,
    EditOperation,
    calculate_position_shift,
    document_link,
)
from gdocs.docs_markdown import BlockDescriptor
from gdocs.docs_planner import plan_insertion
from gdocs.managers.validation_manager import ValidationManager

logger = logging.getLogger(__name__)


@dataclass
class BatchExecutionResult:
    """Complete result of batch execution."""
    success: bool
    total_operations: int
    total_position_shift: int
    message: str
    revision_id: Optional[str] = None
    document_link: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result = {
            "success": self.success,
            "total_operations": self.total_operations,
            "total_position_shift": self.total_position_shift,
            "message": self.message,
            "document_link": self.document_link,
        }
        if self.revision_id:
            result["revision_id"] = self.revision_id
        return result


def _build_operation_summary(operations: List[EditOperation]) -> str:
    counts = Counter(op.type.value for op in operations)
    return ", ".join(f"{count} {name}" for name, count in sorted(counts.items()))


class BatchOperationManager:
    """
    Submits edit batches for one request.

    Every batch is checked with ValidationManager.check_batch first, so an
    out-of-bounds plan fails with InvalidRangeError and no API call is made.
    Remote failures propagate as RemoteRejectedError.
    """

    def __init__(self, gateway: DocsGateway, validator: Optional[ValidationManager] = None):
        self.gateway = gateway
        self.validator = validator or ValidationManager()

    async def execute(
        self,
        document_id: str,
        operations: List[EditOperation],
        document_end: int,
        revision_id: Optional[str] = None,
    ) -> BatchExecutionResult:
        """
        Validate and apply one batch.

        Args:
            document_id: Target document
            operations: Ordered operations, indices already adjusted for each other
            document_end: Last deletable index of the targeted body when the batch was planned
            revision_id: Revision of the snapshot the batch was planned against

        Returns:
            BatchExecutionResult describing the applied batch
        """
        self.validator.check_batch(operations, document_end)

        if not operations:
            return BatchExecutionResult(
                success=True,
                total_operations=0,
                total_position_shift=0,
                message="Nothing to apply",
                revision_id=revision_id,
                document_link=document_link(document_id),
            )

        summary = _build_operation_summary(operations)
        logger.info(f"Executing batch on document {document_id}: {summary}")

        new_revision = await self.gateway.apply_edits(document_id, operations, revision_id)

        return BatchExecutionResult(
            success=True,
            total_operations=len(operations),
            total_position_shift=calculate_position_shift(operations),
            message=f"Successfully executed {len(operations)} operations ({summary})",
            revision_id=new_revision,
            document_link=document_link(document_id),
        )

    async def rewrite(
        self,
        document_id: str,
        base_index: int,
        document_end: int,
        blocks: List[BlockDescriptor],
        tab_id: Optional[str] = None,
        revision_id: Optional[str] = None,
    ) -> BatchExecutionResult:
        """
        Replace everything in [base_index, document_end) with `blocks`.

        The clear and the insert go out as two separate batchUpdate calls. If
        the second call fails the body is left cleared; callers retry the
        whole rewrite.
        """
        if document_end > base_index:
            cleared = await self.execute(
                document_id,
                [DeleteRange(base_index, document_end, tab_id)],
                document_end,
                revision_id,
            )
            revision_id = cleared.revision_id
            document_end = base_index

        operations = plan_insertion(blocks, base_index, tab_id, at_document_end=True)
        try:
            return await self.execute(document_id, operations, document_end, revision_id)
        except Exception:
            logger.error(
                f"Document {document_id} was cleared from index {base_index} but the rewrite failed; "
                "retry the whole write"
            )
            raise
