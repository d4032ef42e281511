"""Native IRC line format (RFC 1459 plus IRCv3 tags)."""

from __future__ import annotations

from ..errors import DecodeError, EncodeError
from .codec import WireFormat
from .message import TAG_FLAG, Message, Numeric, TagValue, normalize_command

CTCP_PREFIX = "ctcp_"
_FORBIDDEN = ("\r", "\n", "\0")


class LineCodec:
    """Buffers bytes and decodes one CRLF (or bare LF) terminated line at a time."""

    wire_format = WireFormat.NATIVE

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def buffer(self) -> bytes:
        return bytes(self._buffer)

    def feed(self, data: bytes) -> None:
        self._buffer += data

    def next_message(self) -> Message | None:
        while True:
            end = self._buffer.find(b"\n")
            if end < 0:
                return None
            raw = bytes(self._buffer[: end + 1])
            del self._buffer[: end + 1]
            line = raw.decode("utf-8", errors="replace")
            if not line.strip(" \r\n"):
                continue
            return self.parse(line)

    def add_data(self, data: bytes) -> list[Message]:
        self.feed(data)
        messages = []
        while (message := self.next_message()) is not None:
            messages.append(message)
        return messages

    def take_buffer(self) -> bytes:
        rest = bytes(self._buffer)
        self._buffer.clear()
        return rest

    def finish(self) -> bytes:
        """Return (and drop) any unterminated fragment left at end of stream."""
        return self.take_buffer()

    @staticmethod
    def parse(line: str) -> Message:
        """Parse a single line (terminator optional) into a ``Message``.

        Raises:
            DecodeError: if no command is present.
        """
        original = line
        if line.endswith("\n"):
            line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]

        tags: dict[str, TagValue] = {}
        if line.startswith("@"):
            tag_block, _, line = line.partition(" ")
            tags = _parse_tags(tag_block[1:])

        sender = None
        if line.startswith(":"):
            token, _, line = line.partition(" ")
            line = line.lstrip(" ")
            if token[1:]:
                sender = token[1:]

        trailing = None
        if " :" in line:
            line, trailing = line.split(" :", 1)
        elif line.startswith(":"):
            # Trailing text with nothing before it: no command
            line, trailing = "", line[1:]

        # Only spaces separate parameters; tabs and formatting codes are data
        argv = [t for t in line.split(" ") if t]
        if not argv:
            raise DecodeError(
                "missing command",
                data={"wire_format": WireFormat.NATIVE.value, "line": original},
            )
        if trailing is not None:
            argv.append(trailing)

        try:
            command = normalize_command(argv[0])
        except ValueError as e:
            raise DecodeError(
                str(e), data={"wire_format": WireFormat.NATIVE.value, "line": original}
            ) from e
        return Message(
            command=command,
            args=argv[1:],
            sender=sender,
            tags=tags,
            trailing=trailing is not None,
        )

    @staticmethod
    def serialize(message: Message) -> bytes:
        """Render ``message`` as one CRLF terminated line.

        Raises:
            EncodeError: if the message cannot be expressed on the line protocol.
        """
        buf = ""
        if message.tags:
            buf += "@" + ";".join(_render_tag(k, v) for k, v in message.tags.items()) + " "

        if message.sender:
            _check_word(message.sender, "sender")
            buf += ":" + message.sender + " "

        buf += _render_command(message)

        args = list(message.args)
        if args:
            last = args.pop()
            for arg in args:
                _check_word(arg, "parameter")
            _check_text(last, "parameter")
            if message.trailing or not last or " " in last or last.startswith(":"):
                last = ":" + last
            buf += " " + " ".join([*args, last])

        return (buf + "\r\n").encode("utf-8")


def _parse_tags(raw_tags: str) -> dict[str, TagValue]:
    tags: dict[str, TagValue] = {}
    for tag in raw_tags.split(";"):
        if not tag:
            continue
        if "=" in tag:
            k, v = tag.split("=", 1)
            tags[k.lower()] = v
        else:
            tags[tag.lower()] = TAG_FLAG
    return tags


def _render_tag(key: str, value: TagValue) -> str:
    if not key or any(c in key for c in "=; ") or any(c in key for c in _FORBIDDEN):
        raise EncodeError(f"tag key {key!r} is not representable", data={"tag": key})
    if value is TAG_FLAG:
        return key
    if not isinstance(value, str) or any(c in value for c in "; ") or any(
        c in value for c in _FORBIDDEN
    ):
        raise EncodeError(f"tag value for {key!r} is not representable", data={"tag": key})
    return f"{key}={value}"


def _render_command(message: Message) -> str:
    command = message.command
    if isinstance(command, Numeric):
        return str(command)
    name = command.name
    if name.startswith(CTCP_PREFIX):
        name = name[len(CTCP_PREFIX):]
    if not name or " " in name or name.startswith(":"):
        raise EncodeError(f"command {command.name!r} is not representable")
    _check_text(name, "command")
    return name.upper()


def _check_text(value: str, what: str) -> None:
    if any(c in value for c in _FORBIDDEN):
        raise EncodeError(f"{what} {value!r} contains a line terminator or NUL")


def _check_word(value: str, what: str) -> None:
    _check_text(value, what)
    if not value or " " in value or (what == "parameter" and value.startswith(":")):
        raise EncodeError(f"{what} {value!r} must be a single non-empty word")
