from __future__ import annotations

import logging

from ..logging_config import log_structured_error
from .internal import (
    DecodeError,
    EncodeError,
    InternalError,
    ProtocolViolation,
    TransportFault,
)


def categorize_error(error: BaseException) -> str:
    """Map an exception to the category used by structured error logging."""
    if isinstance(error, DecodeError):
        return "decode"
    if isinstance(error, EncodeError):
        return "encode"
    if isinstance(error, TransportFault):
        return "transport"
    if isinstance(error, ProtocolViolation):
        return "protocol"
    if isinstance(error, OSError | ConnectionError | TimeoutError):
        return "network"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(message: str, error: Exception, context: dict = None) -> None:
    """Logs an error message with the associated exception details.

    Structured context from ``InternalError.data`` is merged under the
    caller's context, so codec details (wire format, offending bytes) end
    up on the same line.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = categorize_error(error)
    merged: dict = {}
    if isinstance(error, InternalError):
        merged.update(error.data)
    if context:
        merged.update(context)

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=merged or None,
        level=logging.DEBUG if error_type == "protocol" else logging.ERROR,
    )
