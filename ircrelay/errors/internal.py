"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the relay's failure policy.
Only raise these inside codec/connection boundaries – never let raw JSON,
pydantic or socket errors escape to the relay; wrap them instead.

Classes:
  InternalError        – Base for all internal errors.
  DecodeError          – Malformed native line or malformed/unterminated JSON.
  EncodeError          – A message the target wire format cannot represent.
  TransportFault       – Underlying connection error, reset or failed dial.
  ProtocolViolation    – Out-of-sequence signal (e.g. STARTJSON twice).

DecodeError, EncodeError and TransportFault close both legs of a relayed
connection. ProtocolViolation is informational and never closes anything.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal relay errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class DecodeError(InternalError):
    """Raised when incoming bytes cannot be decoded into a message.

    The ``wire_format`` entry of ``data`` names the codec that rejected the input.
    """


class EncodeError(InternalError):
    """Raised when a message cannot be rendered in the outgoing wire format."""


class TransportFault(InternalError):
    """Raised for connection errors, resets and upstream dial failures."""


class ProtocolViolation(InternalError):
    """Raised for out-of-sequence signals; the target state is already reached."""


__all__ = [
    "InternalError",
    "DecodeError",
    "EncodeError",
    "TransportFault",
    "ProtocolViolation",
]
