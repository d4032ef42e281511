"""Error taxonomy and error logging helpers."""

from .internal import (  # noqa: F401
    DecodeError,
    EncodeError,
    InternalError,
    ProtocolViolation,
    TransportFault,
)

__all__ = [
    "InternalError",
    "DecodeError",
    "EncodeError",
    "TransportFault",
    "ProtocolViolation",
]
