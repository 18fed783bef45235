"""
Error taxonomy for the funding assistant.

Remote calls and the checklist aggregation report failures as ``ApiError``
values rather than exceptions. Only the MCP boundary turns them into
``McpError`` via ``raise_for_error``, each kind with a fixed code and message.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, TypeVar, Union

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, ErrorData

logger = logging.getLogger("funding_assistant.errors")

T = TypeVar("T")


class ErrorKind(str, Enum):
    # Remote API client
    UNAUTHORIZED = "UNAUTHORIZED"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    # Checklist aggregation
    FUNDING_OPTION_NOT_FOUND = "FUNDING_OPTION_NOT_FOUND"
    DOCUMENT_CHECKLIST_NOT_FOUND = "DOCUMENT_CHECKLIST_NOT_FOUND"


@dataclass(frozen=True)
class ApiError:
    """
    A failed remote call or aggregation step.

    Attributes:
        kind: Which failure this is.
        cause: The underlying exception or ``ApiError``, kept for diagnostics only.
        detail: Short human-readable context (status code, operation name).
    """

    kind: ErrorKind
    cause: Optional[Union[BaseException, "ApiError"]] = None
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value


Result = Union[T, ApiError]


ERROR_MESSAGES: Dict[ErrorKind, Tuple[int, str]] = {
    ErrorKind.UNAUTHORIZED: (
        INVALID_REQUEST,
        "Authentication required - please provide a valid FLUENTLAB_API_KEY",
    ),
    ErrorKind.TRANSPORT_ERROR: (
        INTERNAL_ERROR,
        "Cannot reach the funding data service, please retry later",
    ),
    ErrorKind.UNKNOWN_ERROR: (INTERNAL_ERROR, "Unknown error occurred"),
    ErrorKind.FUNDING_OPTION_NOT_FOUND: (INVALID_PARAMS, "Funding option not found"),
    ErrorKind.DOCUMENT_CHECKLIST_NOT_FOUND: (INVALID_PARAMS, "Document checklist not found"),
}


def to_mcp_error(error: ApiError, context: Optional[Dict[str, Any]] = None) -> McpError:
    code, message = ERROR_MESSAGES[error.kind]
    data: Dict[str, Any] = {"type": error.kind.value}
    if context:
        data.update(context)
    return McpError(ErrorData(code=code, message=message, data=data))


def raise_for_error(result: Result[T], **context: Any) -> T:
    """
    Return a successful result unchanged, raise the mapped ``McpError`` otherwise.

    Args:
        result: Value returned by the client or the aggregator.
        **context: Identifies the failing request (tool, resource, params);
            attached to the error data and the log record.
    """
    if not isinstance(result, ApiError):
        return result
    logger.warning(
        f"Request failed with {result}",
        extra={"operation": context.get("tool") or context.get("resource") or "", "status": result.kind.value},
    )
    raise to_mcp_error(result, context)


def find_mcp_error(exc: Optional[BaseException]) -> Optional[McpError]:
    """Return the first ``McpError`` in the cause/context chain of ``exc``."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, McpError):
            return exc
        seen.add(id(exc))
        exc = exc.__cause__ or exc.__context__
    return None
