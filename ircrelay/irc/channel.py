"""One socket's codecs and the one-way switch from native to JSON.

Both directions start native. Receiving STARTJSON switches the receive side
to JSON (carrying over bytes the line codec has buffered but not consumed)
and reciprocates on the send side: STARTJSON is written in the native
format, then every later outgoing message is JSON. Neither direction ever
switches back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from ..constants import STARTJSON_COMMAND
from ..errors import ProtocolViolation
from ..errors.handling import log_error
from ..logs.logger import logger
from .codec import Codec, WireFormat
from .json_codec import JsonCodec
from .line_codec import LineCodec
from .message import Message, Token

if TYPE_CHECKING:  # pragma: no cover
    from .trace import WireTap


class WireTransport(Protocol):
    """Byte egress for a channel; ``asyncio.StreamWriter`` satisfies it."""

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...

    def is_closing(self) -> bool: ...


MessageCallback = Callable[["ConnectionChannel", Message], None]
SwitchCallback = Callable[["ConnectionChannel"], None]

STARTJSON_LINE = LineCodec.serialize(Message(command=Token(STARTJSON_COMMAND)))


class ConnectionChannel:  # pylint: disable=too-many-instance-attributes
    """Receive buffer, active codec pair and switch state for one connection.

    Args:
        transport: Where serialized bytes are written.
        label: Short leg name used in logs and wire traces ("C" or "S").
        connection: Connection id shared by both legs of a relay.
        start_json: Switch the send side to JSON immediately (eager mode).
        tap: Optional diagnostic sink for raw reads and writes.
    """

    def __init__(
        self,
        transport: WireTransport,
        *,
        label: str = "C",
        connection: str | None = None,
        start_json: bool = False,
        tap: WireTap | None = None,
    ) -> None:
        self.transport = transport
        self.label = label
        self.connection = connection
        self.tap = tap
        self.peer: ConnectionChannel | None = None
        self.on_message: MessageCallback | None = None
        self.on_receive_switch: SwitchCallback | None = None

        self.receive_format = WireFormat.NATIVE
        self.send_format = WireFormat.NATIVE
        self._decoder: Codec = LineCodec()
        self._encoder: Codec = LineCodec()
        self._closing = False

        if start_json:
            self.enter_json_send_mode()

    @property
    def closing(self) -> bool:
        return self._closing or self.transport.is_closing()

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet decoded."""
        return self._decoder.buffer

    def attach_peer(self, peer: ConnectionChannel) -> None:
        if self.peer is not None and self.peer is not peer:
            raise RuntimeError(f"channel {self.label} already has a peer")
        self.peer = peer

    def add_data(self, data: bytes) -> list[Message]:
        """Decode ``data`` with the active receive codec.

        Returns the messages delivered (STARTJSON excluded), in arrival order.
        Each one is also passed to ``on_message`` as soon as it is decoded.
        Decoding stops once the channel starts closing.

        Raises:
            DecodeError: on malformed input; earlier messages were already delivered.
        """
        if self.tap:
            self.tap.read(self.label, data)
        self._decoder.feed(data)
        delivered = []
        # _decoder is re-read every iteration: a switch replaces it mid-loop
        while not self.closing:
            if (message := self._decoder.next_message()) is None:
                break
            if message.is_command(STARTJSON_COMMAND):
                self._handle_startjson()
                continue
            delivered.append(message)
            if self.on_message:
                self.on_message(self, message)
        return delivered

    def _handle_startjson(self) -> None:
        if self.receive_format is WireFormat.STRUCTURED:
            log_error(
                "Out-of-sequence signal",
                ProtocolViolation("STARTJSON received while already in JSON mode"),
                context={"connection": self.connection, "leg": self.label},
            )
            return
        self.enter_json_receive_mode()

    def enter_json_receive_mode(self) -> bool:
        """Switch the receive side to JSON, then reciprocate on the send side.

        Returns False when the receive side was already JSON.
        """
        if self.receive_format is WireFormat.STRUCTURED:
            return False
        decoder = JsonCodec()
        decoder.feed(self._decoder.take_buffer())
        self._decoder = decoder
        self.receive_format = WireFormat.STRUCTURED
        logger.log_event(
            "channel", "receive_json", level=logging.DEBUG,
            connection=self.connection, leg=self.label,
        )
        self.enter_json_send_mode()
        if self.on_receive_switch:
            self.on_receive_switch(self)
        return True

    def enter_json_send_mode(self) -> bool:
        """Announce STARTJSON in the native format and send JSON from now on.

        Returns False when the send side was already JSON or the channel is
        closing.
        """
        if self.send_format is WireFormat.STRUCTURED or self.closing:
            return False
        self._write(STARTJSON_LINE)
        self._encoder = JsonCodec()
        self.send_format = WireFormat.STRUCTURED
        logger.log_event(
            "channel", "send_json", level=logging.DEBUG,
            connection=self.connection, leg=self.label,
        )
        return True

    def send_message(self, message: Message) -> bool:
        """Serialize ``message`` with the active send codec and write it.

        Returns False if the channel is closing and the message was dropped.

        Raises:
            EncodeError: if the message cannot be expressed in the send format.
        """
        if self.closing:
            return False
        self._write(self._encoder.serialize(message))
        return True

    def _write(self, data: bytes) -> None:
        if self.tap:
            self.tap.write(self.label, data)
        self.transport.write(data)

    def finish(self) -> None:
        """Account for bytes left in the receive codec at end of stream.

        Raises:
            DecodeError: if the JSON decoder stopped inside a value.
        """
        rest = self._decoder.finish()
        if rest:
            logger.log_event(
                "channel", "trailing_dropped", level=logging.DEBUG,
                connection=self.connection, leg=self.label, size=len(rest),
            )

    def close(self) -> None:
        """Flush pending writes, then close. Safe to call more than once."""
        if self._closing:
            return
        self._closing = True
        if not self.transport.is_closing():
            self.transport.close()
