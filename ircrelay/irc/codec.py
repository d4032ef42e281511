"""Codec interface shared by the native and JSON wire formats."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from .message import Message


class WireFormat(Enum):
    NATIVE = "rfc1459"
    STRUCTURED = "json"


class Codec(Protocol):
    """Incremental decoder plus serializer for one wire format.

    ``feed`` only buffers; ``next_message`` consumes exactly one message so a
    caller can stop part-way and hand ``take_buffer()`` to another codec.
    """

    wire_format: WireFormat

    def feed(self, data: bytes) -> None: ...

    def next_message(self) -> Message | None: ...

    def take_buffer(self) -> bytes: ...

    def finish(self) -> bytes: ...

    def serialize(self, message: Message) -> bytes: ...


def drain(codec: Codec) -> Iterator[Message]:
    """Yield every message currently decodable from ``codec``."""
    while (message := codec.next_message()) is not None:
        yield message


def create_codec(wire_format: WireFormat | str) -> Codec:
    """Return a fresh codec for ``wire_format`` ("rfc1459" or "json")."""
    from .json_codec import JsonCodec
    from .line_codec import LineCodec

    fmt = WireFormat(wire_format)
    if fmt is WireFormat.NATIVE:
        return LineCodec()
    return JsonCodec()
