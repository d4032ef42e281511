"""Couples a client-facing and a server-facing channel."""

from __future__ import annotations

import logging
from enum import Enum

from ..errors import DecodeError, EncodeError, InternalError
from ..errors.handling import categorize_error, log_error
from ..logs.logger import logger
from .channel import ConnectionChannel
from .message import Message


class Leg(Enum):
    DOWNSTREAM = "C"
    UPSTREAM = "S"


class RelayPair:
    """Forwards decoded messages between ``downstream`` and ``upstream``.

    - A message decoded on one leg is sent, unmodified, on the other.
    - QUIT from the client is forwarded, then both legs are closed.
    - Either leg ending or failing closes both legs.
    - With ``propagate_switch`` a leg switching to JSON also switches the
      other leg's send side.
    """

    def __init__(
        self,
        downstream: ConnectionChannel,
        upstream: ConnectionChannel,
        *,
        propagate_switch: bool = True,
        connection: str | None = None,
    ) -> None:
        self.downstream = downstream
        self.upstream = upstream
        self.propagate_switch = propagate_switch
        self.connection = connection
        self.closed = False
        self.close_reason: str | None = None

        downstream.attach_peer(upstream)
        upstream.attach_peer(downstream)
        for channel in (downstream, upstream):
            channel.on_message = self._forward
            channel.on_receive_switch = self._mirror_switch

    def channel(self, leg: Leg) -> ConnectionChannel:
        return self.downstream if leg is Leg.DOWNSTREAM else self.upstream

    def _leg_of(self, channel: ConnectionChannel) -> Leg:
        return Leg.DOWNSTREAM if channel is self.downstream else Leg.UPSTREAM

    def receive(self, leg: Leg, data: bytes) -> list[Message]:
        """Feed bytes read from ``leg``; returns the messages it produced.

        Decode and encode failures are handled here: they are logged and
        both legs are closed.
        """
        if self.closed:
            return []
        try:
            return self.channel(leg).add_data(data)
        except (DecodeError, EncodeError) as e:
            self.fault(leg, e)
            return []

    def _forward(self, channel: ConnectionChannel, message: Message) -> None:
        leg = self._leg_of(channel)
        peer = channel.peer
        if peer is not None and not peer.closing:
            peer.send_message(message)
        if leg is Leg.DOWNSTREAM and message.is_command("quit"):
            logger.log_event(
                "relay", "quit_seen", connection=self.connection, leg=leg.value
            )
            self.close("quit")

    def _mirror_switch(self, channel: ConnectionChannel) -> None:
        peer = channel.peer
        if not self.propagate_switch or peer is None or peer.closing:
            return
        if peer.enter_json_send_mode():
            logger.log_event(
                "relay", "switch_propagated", level=logging.DEBUG,
                connection=self.connection, leg=peer.label,
            )

    def connection_lost(self, leg: Leg) -> None:
        """The remote end of ``leg`` closed its side."""
        if self.closed:
            return
        logger.log_event(
            "relay", "connection_lost", connection=self.connection, leg=leg.value
        )
        try:
            self.channel(leg).finish()
        except DecodeError as e:
            log_error(
                "Stream ended mid-message", e,
                context={"connection": self.connection, "leg": leg.value},
            )
        self.close(f"{leg.name.lower()} closed")

    def fault(self, leg: Leg, error: InternalError) -> None:
        """Log a fatal error on ``leg`` and tear the pair down."""
        log_error(
            "Relay leg failed", error,
            context={"connection": self.connection, "leg": leg.value},
        )
        self.close(f"{categorize_error(error)} error on {leg.name.lower()}")

    def close(self, reason: str = "closed") -> None:
        """Flush-then-close both legs; later calls are no-ops."""
        if self.closed:
            return
        self.closed = True
        self.close_reason = reason
        logger.log_event(
            "relay", "teardown", level=logging.DEBUG,
            connection=self.connection, reason=reason,
        )
        self.downstream.close()
        self.upstream.close()
