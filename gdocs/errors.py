"""
Google Docs Error Handling

This module provides structured, actionable error messages for Google Docs operations.
Errors are designed to be self-documenting and help both humans and AI agents
understand what went wrong and how to fix it.

Core operations raise DocsOperationError subclasses; the tool boundary
(core.utils.handle_http_errors) turns them into JSON with format_error().
"""
import json
import logging
from enum import Enum
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for Google Docs operations."""

    # Lookup errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    TAB_NOT_FOUND = "TAB_NOT_FOUND"
    HEADING_NOT_FOUND = "HEADING_NOT_FOUND"

    # Index errors
    INDEX_OUT_OF_BOUNDS = "INDEX_OUT_OF_BOUNDS"
    INVALID_INDEX_RANGE = "INVALID_INDEX_RANGE"

    # Parameter errors
    INVALID_DOCUMENT_ID = "INVALID_DOCUMENT_ID"
    INVALID_PARAM_VALUE = "INVALID_PARAM_VALUE"
    INVALID_COLOR_FORMAT = "INVALID_COLOR_FORMAT"

    # Operation errors
    REMOTE_REJECTED = "REMOTE_REJECTED"


@dataclass
class ErrorContext:
    """Additional context for error messages."""
    operation: Optional[str] = None
    document_id: Optional[str] = None
    received: Optional[Dict[str, Any]] = None
    expected: Optional[Dict[str, Any]] = None
    document_length: Optional[int] = None
    available_headings: Optional[List[str]] = None
    available_tabs: Optional[List[str]] = None
    attempted_index: Optional[int] = None
    service_error: Optional[str] = None
    possible_causes: Optional[List[str]] = None


@dataclass
class StructuredError:
    """
    Structured error response with actionable guidance.

    Attributes:
        error: Always True for error responses
        code: Machine-readable error code from ErrorCode enum
        message: Human-readable error description
        reason: Explanation of why this error occurred
        suggestion: Actionable advice on how to fix the issue
        example: Optional example showing correct usage
        context: Additional context like received values, document length, etc.
    """
    error: bool = True
    code: str = ""
    message: str = ""
    reason: str = ""
    suggestion: str = ""
    example: Optional[Dict[str, Any]] = None
    context: Optional[ErrorContext] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result = {
            "error": self.error,
            "code": self.code,
            "message": self.message,
        }

        if self.reason:
            result["reason"] = self.reason
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.example:
            result["example"] = self.example
        if self.context:
            ctx = asdict(self.context)
            ctx = {k: v for k, v in ctx.items() if v is not None}
            if ctx:
                result["context"] = ctx

        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


class DocsOperationError(Exception):
    """Base class for errors raised by core document operations."""

    def __init__(self, structured: StructuredError):
        super().__init__(structured.message)
        self.structured = structured

    @property
    def code(self) -> str:
        return self.structured.code

    def for_operation(self, operation: str, document_id: Optional[str]) -> StructuredError:
        """Stamp the failing operation and document onto the structured error."""
        if self.structured.context is None:
            self.structured.context = ErrorContext()
        self.structured.context.operation = operation
        if document_id and not self.structured.context.document_id:
            self.structured.context.document_id = document_id
        return self.structured


class NotFoundError(DocsOperationError):
    """A document, tab or heading reference did not resolve."""


class InvalidRangeError(DocsOperationError):
    """A computed or requested range is empty, inverted or out of bounds."""


class InvalidParameterError(DocsOperationError):
    """A tool argument is malformed (bad color, unknown style field, empty document ID)."""


class RemoteRejectedError(DocsOperationError):
    """The Docs API refused a batchUpdate."""


class DocsErrorBuilder:
    """
    Builder for creating structured error messages.

    Usage:
        raise NotFoundError(DocsErrorBuilder.heading_not_found("Intro", ["Body"]))
    """

    @staticmethod
    def index_out_of_bounds(
        index_name: str,
        index_value: int,
        document_length: int
    ) -> StructuredError:
        """Error when an index exceeds document length."""
        return StructuredError(
            code=ErrorCode.INDEX_OUT_OF_BOUNDS.value,
            message=f"{index_name} {index_value} is outside the document (end index {document_length})",
            reason=(
                f"Valid indices run from 1 to {document_length - 1}. "
                f"The requested {index_name} of {index_value} is outside this range."
            ),
            suggestion="Use find_doc_headings or read_doc to check document positions before editing.",
            example={
                "valid_range": f"Use indices between 1 and {document_length - 1}"
            },
            context=ErrorContext(
                document_length=document_length,
                received={index_name: index_value}
            )
        )

    @staticmethod
    def invalid_index_range(
        start_index: int,
        end_index: int
    ) -> StructuredError:
        """Error when start_index >= end_index."""
        return StructuredError(
            code=ErrorCode.INVALID_INDEX_RANGE.value,
            message=f"start_index ({start_index}) must be less than end_index ({end_index})",
            reason="The start of a range must come before its end.",
            suggestion="Swap the values or correct the range specification.",
            context=ErrorContext(
                received={"start_index": start_index, "end_index": end_index},
                expected={"start_index": min(start_index, end_index), "end_index": max(start_index, end_index)}
            )
        )

    @staticmethod
    def heading_not_found(
        heading: str,
        available_headings: List[str],
    ) -> StructuredError:
        """Error when a heading is not found in the document."""
        # Truncate available headings list for display
        display_headings = available_headings[:10]
        if len(available_headings) > 10:
            display_headings.append(f"... and {len(available_headings) - 10} more")

        return StructuredError(
            code=ErrorCode.HEADING_NOT_FOUND.value,
            message=f"Heading '{heading}' not found in document",
            reason="No heading with this text was found (matching ignores case and surrounding whitespace).",
            suggestion="Check spelling of the heading text.",
            example={
                "list_headings": "find_doc_headings(document_id='...')"
            },
            context=ErrorContext(
                received={"heading": heading},
                available_headings=display_headings
            )
        )

    @staticmethod
    def tab_not_found(
        tab: str,
        available_tabs: List[str],
    ) -> StructuredError:
        """Error when a tab id or title does not match any tab."""
        return StructuredError(
            code=ErrorCode.TAB_NOT_FOUND.value,
            message=f"Tab '{tab}' not found in document",
            reason="No tab has this ID, and no tab title matches it (ignoring case and surrounding whitespace).",
            suggestion="Use list_doc_tabs to see the available tabs.",
            context=ErrorContext(
                received={"tab": tab},
                available_tabs=available_tabs
            )
        )

    @staticmethod
    def document_not_found(
        document_id: str
    ) -> StructuredError:
        """Error when a document cannot be found or accessed."""
        return StructuredError(
            code=ErrorCode.DOCUMENT_NOT_FOUND.value,
            message=f"Document with ID '{document_id}' not found or not accessible",
            reason="The document could not be found or you don't have permission to access it.",
            suggestion="Verify the document ID is correct. You can find the ID in the document's URL: docs.google.com/document/d/{document_id}/edit",
            context=ErrorContext(
                document_id=document_id,
                possible_causes=[
                    "Document ID is incorrect",
                    "Document was deleted",
                    "You don't have permission to access this document",
                    "Document ID includes extra characters (quotes, spaces)"
                ]
            )
        )

    @staticmethod
    def remote_rejected(
        document_id: str,
        attempted_index: Optional[int],
        service_error: str,
        operation_count: int = 0,
    ) -> StructuredError:
        """Error when the Docs API rejects a batch of edits."""
        return StructuredError(
            code=ErrorCode.REMOTE_REJECTED.value,
            message=f"Google Docs rejected a batch of {operation_count} edit(s): {service_error}",
            reason="The document may have changed since it was read, or an index no longer points at valid text.",
            suggestion="Re-read the document and retry the whole operation.",
            context=ErrorContext(
                document_id=document_id,
                attempted_index=attempted_index,
                service_error=service_error,
            )
        )

    @staticmethod
    def invalid_param_value(
        param_name: str,
        received_value: Any,
        valid_values: Optional[List[str]] = None,
        detail: str = "",
    ) -> StructuredError:
        """Error when a parameter has an invalid value."""
        suggestion = f"Use one of: {', '.join(valid_values)}" if valid_values else "Check the parameter value."
        return StructuredError(
            code=ErrorCode.INVALID_PARAM_VALUE.value,
            message=f"Invalid value for '{param_name}': {detail or repr(received_value)}",
            suggestion=suggestion,
            context=ErrorContext(
                received={param_name: repr(received_value)},
                expected={"valid_values": valid_values} if valid_values else None
            )
        )

    @staticmethod
    def invalid_color_format(
        color_value: str,
        param_name: str = "color"
    ) -> StructuredError:
        """Error when a color value cannot be parsed."""
        return StructuredError(
            code=ErrorCode.INVALID_COLOR_FORMAT.value,
            message=f"Invalid color format for {param_name}: '{color_value}'",
            reason="Colors must be hex codes or one of the supported named colors.",
            suggestion="Use '#RRGGBB', '#RGB' or a named color such as 'red' or 'blue'.",
            context=ErrorContext(received={param_name: color_value})
        )


def format_error(error: StructuredError) -> str:
    """
    Format a StructuredError for return to the user.

    Returns a JSON string that can be parsed by both humans and AI agents.
    """
    return error.to_json()

