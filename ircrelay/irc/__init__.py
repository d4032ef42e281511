"""IRC message model, wire codecs and the relay state machine.

Contains the message model, the native line codec, the JSON codec, the
per-connection format-switch channel and the relay pair.
"""

from .channel import ConnectionChannel, WireTransport  # noqa: F401
from .codec import WireFormat, create_codec  # noqa: F401
from .json_codec import JsonCodec, StructuredMessage  # noqa: F401
from .line_codec import LineCodec  # noqa: F401
from .message import TAG_FLAG, Message, Numeric, Token, normalize_command  # noqa: F401
from .relay import Leg, RelayPair  # noqa: F401
from .trace import WireTap  # noqa: F401

__all__ = [
    "ConnectionChannel",
    "WireTransport",
    "WireFormat",
    "create_codec",
    "JsonCodec",
    "StructuredMessage",
    "LineCodec",
    "TAG_FLAG",
    "Message",
    "Numeric",
    "Token",
    "normalize_command",
    "Leg",
    "RelayPair",
    "WireTap",
]
