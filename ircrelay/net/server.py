"""Asyncio listener that relays each accepted client to the upstream server."""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import logging

from ..config.model import RelayConfig
from ..constants import READ_CHUNK_SIZE
from ..errors import TransportFault
from ..errors.handling import log_error
from ..irc.channel import ConnectionChannel
from ..irc.relay import Leg, RelayPair
from ..irc.trace import WireTap
from ..logs.logger import logger
from .dialer import dial_upstream


class RelayServer:
    """Accepts clients and wires every one of them to its own upstream leg."""

    def __init__(self, config: RelayConfig) -> None:
        self.config = config
        self._server: asyncio.Server | None = None
        self._ids = itertools.count(1)
        self._tasks: set[asyncio.Task] = set()
        self.pairs: dict[str, RelayPair] = {}

    @property
    def sockets(self):
        return self._server.sockets if self._server else ()

    async def start(self) -> asyncio.Server:
        self._server = await asyncio.start_server(
            self._on_client, self.config.listen_host, self.config.listen_port
        )
        for sock in self._server.sockets:
            logger.log_event("app", "listening", address=sock.getsockname())
        return self._server

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        async with self._server:
            await self._server.serve_forever()

    async def close(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
        for pair in list(self.pairs.values()):
            pair.close("shutdown")
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _on_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        await self.handle_client(reader, writer)

    async def handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        connection = f"conn-{next(self._ids)}"
        logger.log_event(
            "relay", "client_accepted", connection=connection,
            peer=writer.get_extra_info("peername"),
        )
        try:
            up_reader, up_writer = await dial_upstream(
                self.config.connect_host, self.config.connect_port, connection=connection
            )
        except TransportFault as e:
            log_error("Upstream unreachable", e, context={"connection": connection})
            writer.close()
            return
        logger.log_event(
            "relay", "upstream_connected", connection=connection,
            host=self.config.connect_host, port=self.config.connect_port,
        )

        tap = WireTap(connection) if self.config.trace else None
        downstream = ConnectionChannel(
            writer, label=Leg.DOWNSTREAM.value, connection=connection, tap=tap
        )
        upstream = ConnectionChannel(
            up_writer, label=Leg.UPSTREAM.value, connection=connection,
            start_json=self.config.start_json, tap=tap,
        )
        pair = RelayPair(
            downstream, upstream,
            propagate_switch=self.config.propagate_switch, connection=connection,
        )
        self.pairs[connection] = pair
        try:
            await asyncio.gather(
                self._pump(pair, Leg.DOWNSTREAM, reader, up_writer),
                self._pump(pair, Leg.UPSTREAM, up_reader, writer),
            )
        finally:
            pair.close("finished")
            self.pairs.pop(connection, None)
            for w in (writer, up_writer):
                with contextlib.suppress(ConnectionError, OSError):
                    await w.wait_closed()
            logger.log_event("relay", "closed", level=logging.DEBUG, connection=connection)

    @staticmethod
    async def _pump(
        pair: RelayPair,
        leg: Leg,
        reader: asyncio.StreamReader,
        destination: asyncio.StreamWriter,
    ) -> None:
        """Read from ``leg`` until EOF, then tell the pair the leg is gone."""
        try:
            while not pair.closed:
                data = await reader.read(READ_CHUNK_SIZE)
                if not data:
                    pair.connection_lost(leg)
                    return
                pair.receive(leg, data)
                if not destination.is_closing():
                    # Stop reading while the other side's write buffer is full
                    await destination.drain()
        except (ConnectionError, OSError) as e:
            pair.fault(
                leg,
                TransportFault(
                    f"{leg.name.lower()} transport error: {e}",
                    data={"leg": leg.value},
                ),
            )
