"""
Validation Manager

This module provides centralized validation logic for Google Docs operations.
Everything here runs before a request is sent, so an invalid edit never
reaches the Docs API.
"""
import logging
from typing import Dict, Any, List, Tuple, Optional

from gdocs.docs_helpers import (
    DeleteRange,
    EditOperation,
    InsertText,
    _parse_color,
)
from gdocs.docs_model import TextStyle
from gdocs.errors import (
    DocsErrorBuilder,
    ErrorCode,
    InvalidParameterError,
    InvalidRangeError,
    StructuredError,
)

logger = logging.getLogger(__name__)


class ValidationManager:
    """
    Centralized validation manager for Google Docs operations.

    Provides consistent validation patterns and error messages across
    all document operations.
    """

    def __init__(self):
        """Initialize the validation manager."""
        self.validation_rules = self._setup_validation_rules()

    def _setup_validation_rules(self) -> Dict[str, Any]:
        """Setup validation rules and constraints."""
        return {
            'max_text_length': 1000000,  # 1MB text limit
            'font_size_range': (1, 400),  # Google Docs font size limits
        }

    def validate_document_id(self, document_id: str) -> Tuple[bool, str]:
        """
        Validate Google Docs document ID format.

        Args:
            document_id: Document ID to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not document_id:
            return False, "Document ID cannot be empty"

        if not isinstance(document_id, str):
            return False, f"Document ID must be a string, got {type(document_id).__name__}"

        if document_id != document_id.strip() or any(c in document_id for c in "'\"/ "):
            return False, "Document ID contains whitespace, quotes or slashes"

        return True, ""

    def require_document_id(self, document_id: str) -> None:
        is_valid, error_msg = self.validate_document_id(document_id)
        if not is_valid:
            raise InvalidParameterError(
                StructuredError(
                    code=ErrorCode.INVALID_DOCUMENT_ID.value,
                    message=error_msg,
                    suggestion="Pass the ID from the document URL: docs.google.com/document/d/{document_id}/edit",
                )
            )

    def validate_index_range(
        self,
        start_index: int,
        end_index: Optional[int] = None,
        document_end: Optional[int] = None
    ) -> Tuple[bool, str]:
        """
        Validate document index ranges.

        Args:
            start_index: Starting index
            end_index: Ending index (optional)
            document_end: Last deletable index, for bounds checking

        Returns:
            Tuple of (is_valid, error_message)
        """
        if start_index < 1:
            return False, f"start_index must be at least 1, got {start_index}"

        if end_index is not None and end_index <= start_index:
            return False, f"end_index ({end_index}) must be greater than start_index ({start_index})"

        if document_end is not None:
            if start_index > document_end:
                return False, f"start_index ({start_index}) exceeds document end ({document_end})"

            if end_index is not None and end_index > document_end + 1:
                return False, f"end_index ({end_index}) exceeds document end ({document_end + 1})"

        return True, ""

    def check_range(self, start_index: int, end_index: int, document_end: int) -> None:
        """Raise InvalidRangeError unless [start_index, end_index) is a non-empty range in bounds."""
        if end_index <= start_index:
            raise InvalidRangeError(DocsErrorBuilder.invalid_index_range(start_index, end_index))
        if start_index < 1 or start_index > document_end:
            raise InvalidRangeError(
                DocsErrorBuilder.index_out_of_bounds("start_index", start_index, document_end + 1)
            )
        if end_index > document_end + 1:
            raise InvalidRangeError(
                DocsErrorBuilder.index_out_of_bounds("end_index", end_index, document_end + 1)
            )

    def check_batch(self, operations: List[EditOperation], document_end: int) -> None:
        """
        Verify every operation of a batch against the bounds it will see.

        Inserts and deletes move the document end for the operations that
        follow them, exactly as the API applies them in order. Deletes must
        stop short of the trailing newline; style ranges may include it.

        Raises:
            InvalidRangeError: on the first offending operation
        """
        end = document_end
        for op in operations:
            if isinstance(op, InsertText):
                if op.index < 1 or op.index > end:
                    raise InvalidRangeError(
                        DocsErrorBuilder.index_out_of_bounds("index", op.index, end + 1)
                    )
                end += op.length
            elif isinstance(op, DeleteRange):
                if op.end <= op.start:
                    raise InvalidRangeError(DocsErrorBuilder.invalid_index_range(op.start, op.end))
                if op.start < 1 or op.end > end:
                    raise InvalidRangeError(
                        DocsErrorBuilder.index_out_of_bounds("end_index", op.end, end + 1)
                    )
                end -= op.end - op.start
            else:
                self.check_range(op.start, op.end, end)

    def validate_text_style(self, style: Optional[TextStyle]) -> None:
        """
        Validate style values before they are turned into requests.

        Raises:
            InvalidParameterError: for an out-of-range font size or unparseable color
        """
        if style is None:
            return

        if style.font_size is not None:
            low, high = self.validation_rules['font_size_range']
            if not low <= style.font_size <= high:
                raise InvalidParameterError(
                    DocsErrorBuilder.invalid_param_value(
                        "font_size", style.font_size, detail=f"must be between {low} and {high}"
                    )
                )

        for param_name in ("foreground_color", "background_color"):
            color = getattr(style, param_name)
            if color is None:
                continue
            try:
                _parse_color(color)
            except ValueError:
                raise InvalidParameterError(
                    DocsErrorBuilder.invalid_color_format(color, param_name)
                )

    def validate_text_content(self, text: str, max_length: Optional[int] = None) -> Tuple[bool, str]:
        """
        Validate text content for insertion.

        Args:
            text: Text to validate
            max_length: Maximum allowed length

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not isinstance(text, str):
            return False, f"Text must be a string, got {type(text).__name__}"

        max_len = max_length or self.validation_rules['max_text_length']
        if len(text) > max_len:
            return False, f"Text too long ({len(text)} characters). Maximum: {max_len}"

        return True, ""

    def require_text_content(self, text: str) -> None:
        is_valid, error_msg = self.validate_text_content(text)
        if not is_valid:
            raise InvalidParameterError(
                DocsErrorBuilder.invalid_param_value("content", "<content>", detail=error_msg)
            )
