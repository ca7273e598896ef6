"""MCP tool definitions."""

from datetime import datetime, timezone
from typing import Any

from doc_archive.exceptions import (
    CorruptArchiveError,
    NotFoundError,
    UnsupportedVersionError,
)

__all__ = ["create_error_response", "error_response_from_exception"]


def create_error_response(
    message: str,
    error_type: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create standardized error response for MCP tools.

    Args:
        message: User-friendly error message
        error_type: Error type name (e.g., ValidationError, NotFoundError)
        details: Optional additional details

    Returns:
        Structured error response dictionary
    """
    response = {
        "error": True,
        "message": message,
        "error_type": error_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        response["details"] = details
    return response


def error_response_from_exception(error: Exception) -> dict[str, Any]:
    """Map an archive or I/O failure to an error response.

    Order matters: FileNotFoundError is an OSError and our ValidationError
    is a ValueError.
    """
    if isinstance(error, (NotFoundError, FileNotFoundError)):
        error_type = "NotFoundError"
    elif isinstance(error, CorruptArchiveError):
        error_type = "CorruptArchiveError"
    elif isinstance(error, UnsupportedVersionError):
        error_type = "UnsupportedVersionError"
    elif isinstance(error, ValueError):
        error_type = "ValidationError"
    elif isinstance(error, OSError):
        error_type = "IOError"
    else:
        error_type = type(error).__name__
    return create_error_response(message=str(error), error_type=error_type)
