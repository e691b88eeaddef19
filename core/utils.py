import json
import logging
import functools

from typing import Any, Optional

from googleapiclient.errors import HttpError
from auth.google_auth import GoogleAuthenticationError
from gdocs.errors import DocsErrorBuilder, DocsOperationError, ErrorContext, format_error

logger = logging.getLogger(__name__)


def _create_docs_not_found_error(tool_name: str, document_id: str) -> str:
    """
    Create a structured error response for document not found (404) errors.

    Args:
        tool_name: The tool that failed
        document_id: The document ID that was not found

    Returns:
        A JSON string with structured error details
    """
    structured = DocsErrorBuilder.document_not_found(document_id)
    structured.context.operation = tool_name
    return format_error(structured)


def _operation_error_response(
    tool_name: str, error: DocsOperationError, document_id: Optional[str]
) -> str:
    structured = error.for_operation(tool_name, document_id)
    if structured.context is None:
        structured.context = ErrorContext()
    if not structured.context.service_error:
        structured.context.service_error = str(error)
    return format_error(structured)


def handle_http_errors(
    tool_name: str, is_read_only: bool = False, service_type: Optional[str] = None
):
    """
    A decorator to turn core operation errors and Google API HttpErrors into
    tool responses in a standardized way.

    DocsOperationError (not found, invalid range, invalid parameter, rejected
    batch) becomes a JSON structured error naming the tool, the document and
    the underlying error. A Docs 404 becomes a structured not-found error too.
    Other HttpErrors are logged and re-raised as a generic Exception with a
    user-friendly message. Nothing is retried.

    Args:
        tool_name (str): The name of the tool being decorated (e.g., 'read_doc').
        is_read_only (bool): Whether the tool only reads. Only used for logging.
        service_type (str): Optional. The Google service type (e.g., 'docs').
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            document_id: Any = kwargs.get("document_id")
            try:
                return await func(*args, **kwargs)
            except DocsOperationError as e:
                log = logger.info if is_read_only else logger.warning
                log(f"[{tool_name}] {type(e).__name__}: {e}")
                return _operation_error_response(tool_name, e, document_id)
            except HttpError as error:
                status = error.resp.status
                if status in [401, 403]:
                    # Authentication/authorization errors
                    message = (
                        f"API error in {tool_name}: {error}. "
                        "You might need to re-authenticate: delete the stored token file "
                        "and run the server again to grant access."
                    )
                elif status == 404 and service_type == "docs":
                    logger.error(f"Document not found in {tool_name}: {error}", exc_info=True)
                    return _create_docs_not_found_error(tool_name, document_id or "unknown")
                else:
                    message = f"API error in {tool_name}: {error}"

                logger.error(f"API error in {tool_name}: {error}", exc_info=True)
                raise Exception(message) from error
            except GoogleAuthenticationError:
                # Re-raise authentication errors without wrapping
                raise
            except Exception as e:
                message = f"An unexpected error occurred in {tool_name}: {e}"
                logger.exception(message)
                raise Exception(message) from e

        return wrapper

    return decorator


def to_json(payload: Any) -> str:
    """Serialize a tool result the way every tool in this server returns JSON."""
    return json.dumps(payload, indent=2, ensure_ascii=False)
