"""JSON wire format.

Each message is one top-level object::

    {"tags": {...}, "source": "nick!u@h" | null, "verb": "privmsg" | 1, "params": ["#chan", "hi"]}

Values may arrive split across reads and may be concatenated with no
separator, so the decoder tracks object boundaries itself before handing a
complete value to ``json.loads``.
"""

from __future__ import annotations

import json
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from ..errors import DecodeError, EncodeError
from .codec import WireFormat
from .message import Message, TagValue, normalize_command

_WHITESPACE = b" \t\r\n"


class StructuredMessage(BaseModel):
    """Schema of one JSON-encoded message."""

    model_config = ConfigDict(extra="ignore")

    tags: dict[StrictStr, StrictStr | Literal[True]] = Field(default_factory=dict)
    source: StrictStr | None = None
    verb: StrictStr | StrictInt
    params: list[StrictStr] = Field(default_factory=list)

    @classmethod
    def from_message(cls, message: Message) -> StructuredMessage:
        return cls(
            tags=dict(message.tags),
            source=message.sender,
            verb=message.verb,
            params=list(message.args),
        )

    def to_message(self) -> Message:
        tags: dict[str, TagValue] = {k.lower(): v for k, v in self.tags.items()}
        return Message(
            command=normalize_command(self.verb),
            args=list(self.params),
            sender=self.source,
            tags=tags,
        )


class JsonCodec:
    """Incremental decoder for back-to-back JSON objects."""

    wire_format = WireFormat.STRUCTURED

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._reset_scan()

    def _reset_scan(self) -> None:
        self._scan_pos = 0
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self._started = False

    @property
    def buffer(self) -> bytes:
        return bytes(self._buffer)

    def feed(self, data: bytes) -> None:
        self._buffer += data

    def next_message(self) -> Message | None:
        end = self._scan()
        if end is None:
            return None
        raw = bytes(self._buffer[:end])
        del self._buffer[:end]
        self._reset_scan()
        return self.parse(raw)

    def add_data(self, data: bytes) -> list[Message]:
        self.feed(data)
        messages = []
        while (message := self.next_message()) is not None:
            messages.append(message)
        return messages

    def take_buffer(self) -> bytes:
        rest = bytes(self._buffer)
        self._buffer.clear()
        self._reset_scan()
        return rest

    def finish(self) -> bytes:
        """Check the stream ended on a value boundary.

        Raises:
            DecodeError: if an unfinished value is still buffered.
        """
        rest = self.take_buffer()
        if rest.strip(_WHITESPACE):
            raise DecodeError(
                "stream ended inside a JSON value",
                data={"wire_format": WireFormat.STRUCTURED.value, "pending": len(rest)},
            )
        return b""

    def _scan(self) -> int | None:
        """Advance the boundary scanner; return the end offset of a complete value."""
        buf = self._buffer
        pos = self._scan_pos
        while pos < len(buf):
            ch = buf[pos]
            if not self._started:
                if ch in _WHITESPACE:
                    # Drop separators so they never count as pending data
                    del buf[pos]
                    continue
                if ch != ord("{"):
                    snippet = bytes(buf[pos : pos + 32])
                    raise DecodeError(
                        "expected a JSON object",
                        data={"wire_format": WireFormat.STRUCTURED.value, "data": snippet},
                    )
                self._started = True
                self._depth = 1
            elif self._in_string:
                if self._escaped:
                    self._escaped = False
                elif ch == ord("\\"):
                    self._escaped = True
                elif ch == ord('"'):
                    self._in_string = False
            elif ch == ord('"'):
                self._in_string = True
            elif ch in b"{[":
                self._depth += 1
            elif ch in b"}]":
                self._depth -= 1
                if self._depth == 0:
                    self._scan_pos = pos + 1
                    return pos + 1
            pos += 1
        self._scan_pos = pos
        return None

    @staticmethod
    def parse(raw: bytes | str) -> Message:
        """Decode one complete JSON object into a ``Message``.

        Raises:
            DecodeError: on invalid JSON or a value that does not match the schema.
        """
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8", errors="replace")
            return StructuredMessage.model_validate(json.loads(raw)).to_message()
        except (json.JSONDecodeError, ValidationError, ValueError) as e:
            raise DecodeError(
                f"invalid JSON message: {e}",
                data={"wire_format": WireFormat.STRUCTURED.value},
            ) from e

    @staticmethod
    def serialize(message: Message) -> bytes:
        """Render ``message`` as a compact JSON object (no trailing newline).

        Raises:
            EncodeError: if a field has a type JSON messages cannot carry.
        """
        try:
            doc = StructuredMessage.from_message(message).model_dump()
        except ValidationError as e:
            raise EncodeError(f"message not representable as JSON: {e}") from e
        return json.dumps(doc, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
