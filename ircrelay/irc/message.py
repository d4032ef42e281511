"""Format-agnostic IRC message model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias

# Value of a tag that was sent without "=value"
TAG_FLAG: Literal[True] = True

TagValue: TypeAlias = str | Literal[True]

SENDER_MARKER = ":"


@dataclass(frozen=True, slots=True)
class Numeric:
    """Numeric reply code in [1, 999]."""

    code: int

    def __str__(self) -> str:
        return f"{self.code:03d}"


@dataclass(frozen=True, slots=True)
class Token:
    """Symbolic command, always lowercase."""

    name: str

    def __str__(self) -> str:
        return self.name


Command: TypeAlias = Numeric | Token


def normalize_command(value: str | int | Command) -> Command:
    """Turn a raw command into its canonical form.

    Digit strings and ints in [1, 999] become ``Numeric``; everything else is
    lowercased into a ``Token`` (so ``"1000"`` stays the token ``"1000"``).

    Raises:
        ValueError: if the command is empty or of an unsupported type.
    """
    if isinstance(value, Numeric | Token):
        return value
    if isinstance(value, bool):
        raise ValueError(f"unsupported command value: {value!r}")
    if isinstance(value, int):
        if 1 <= value <= 999:
            return Numeric(value)
        return Token(str(value))
    if not isinstance(value, str):
        raise ValueError(f"unsupported command value: {value!r}")
    if not value:
        raise ValueError("empty command")
    if value.isascii() and value.isdigit():
        code = int(value)
        if 1 <= code <= 999:
            return Numeric(code)
    return Token(value.lower())


@dataclass(slots=True)
class Message:
    """One protocol message, independent of wire format.

    Attributes:
        command: Numeric reply or lowercase token.
        args: Positional parameters; only the last may contain a space on
            the native wire.
        sender: Message source; ``None`` (absent) and ``""`` are distinct.
        tags: Lowercase keys mapped to a string or ``TAG_FLAG``.
        trailing: Rendering hint set by the line codec when the last
            parameter arrived in the `` :trailing`` form. Not part of equality.
    """

    command: Command
    args: list[str] = field(default_factory=list)
    sender: str | None = None
    tags: dict[str, TagValue] = field(default_factory=dict)
    trailing: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        self.command = normalize_command(self.command)
        self.args = [str(a) for a in self.args]
        self.tags = {str(k).lower(): v for k, v in self.tags.items()}

    @classmethod
    def from_values(
        cls, *values: str | int, tags: dict[str, TagValue] | None = None
    ) -> Message:
        """Build a message from a raw value list.

        A leading value starting with ``:`` is the sender; the next value is
        the command and the rest are arguments::

            Message.from_values(":irc.example.com", "001", "nick", "Welcome")
        """
        items = list(values)
        sender = None
        if items and isinstance(items[0], str) and items[0].startswith(SENDER_MARKER):
            sender = items.pop(0)[len(SENDER_MARKER):]
        if not items:
            raise ValueError("message needs a command")
        command = items.pop(0)
        return cls(
            command=normalize_command(command),
            args=[str(i) for i in items],
            sender=sender,
            tags=dict(tags or {}),
        )

    def is_command(self, name: str | int) -> bool:
        return self.command == normalize_command(name)

    @property
    def verb(self) -> str | int:
        """Command as a plain value: the int code or the token string."""
        if isinstance(self.command, Numeric):
            return self.command.code
        return self.command.name
