"""
Error handling utilities for applications embedding the client.
"""

from __future__ import annotations

from pincho.exceptions import PinchoError


def format_exception_for_response(e: Exception) -> dict[str, object]:
    """
    Format exception for an API error response or structured log.

    Extracts kind, status code, retryability and context from PinchoError
    subclasses, or formats generic exceptions.

    Args:
        e: Exception to format

    Returns:
        Dictionary with error details

    Example:
        try:
            await client.send("Deploy", "v1.2.3 is live")
        except PinchoError as e:
            return JSONResponse(status_code=502, content=format_exception_for_response(e))
    """
    error_dict: dict[str, object] = {
        "error": type(e).__name__,
        "message": str(e),
    }

    if isinstance(e, PinchoError):
        error_dict["kind"] = e.kind.value
        error_dict["status_code"] = e.status_code
        error_dict["retryable"] = e.is_retryable
        if e.context:
            error_dict["context"] = e.context

    return error_dict
