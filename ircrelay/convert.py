"""Stand-alone conversion between the line format and JSON."""

from __future__ import annotations

from typing import BinaryIO

from .constants import READ_CHUNK_SIZE
from .irc.codec import WireFormat, create_codec, drain


def convert_stream(
    src: BinaryIO,
    dst: BinaryIO,
    from_format: WireFormat | str,
    to_format: WireFormat | str,
    chunk_size: int = READ_CHUNK_SIZE,
) -> int:
    """Re-serialize every message read from ``src`` onto ``dst``.

    JSON output is written one value per line. STARTJSON is converted like
    any other message. Returns the number of messages written.

    Raises:
        DecodeError: on malformed input or a JSON value cut off at EOF.
        EncodeError: if a message cannot be written in ``to_format``.
    """
    reader = create_codec(from_format)
    writer = create_codec(to_format)
    newline = b"\n" if writer.wire_format is WireFormat.STRUCTURED else b""
    count = 0
    read = getattr(src, "read1", src.read)
    while chunk := read(chunk_size):
        reader.feed(chunk)
        for message in drain(reader):
            dst.write(writer.serialize(message) + newline)
            count += 1
        dst.flush()
    reader.finish()
    return count
