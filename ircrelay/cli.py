"""Command-line entry point for the relay and the stand-alone converter."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from pydantic import ValidationError

from .config.model import RelayConfig
from .convert import convert_stream
from .errors import DecodeError, EncodeError
from .errors.handling import log_error
from .irc.codec import WireFormat
from .logging_config import LoggerConfigurator, error_aggregator
from .logs.logger import logger
from .net.server import RelayServer

HELPTEXT = """\
Trivial IRC proxy and JSON converter.

This uses the STARTJSON command to signal that the remainder of the stream in
that direction is JSON. No capability negotiation is done to determine if this
will work.

Subcommands:

  parser <from> <to>
    Convert stdin to stdout between serialisations. "rfc1459" and "json" are
    the valid values of the arguments.

  simple <listenhost> <listenport> <connecthost> <connectport>
    Be a simple IRC proxy. Listen on the host and port given by the first two
    arguments. Any connections are relayed to the host and port given by the
    last two. If STARTJSON is used, respond in kind.

  startjson <listenhost> <listenport> <connecthost> <connectport>
    Like simple, except start the connection to upstream with STARTJSON.

Both simple and startjson log to stderr the bytes read and written. "<<"
for a write, ">>" for a read. C for clientwards, S for serverwards.
Pass --no-trace to turn that off.
"""

FORMATS = [f.value for f in WireFormat]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ircrelay",
        description=HELPTEXT,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command")

    conv = sub.add_parser("parser", help="convert stdin to stdout")
    conv.add_argument("from_format", choices=FORMATS)
    conv.add_argument("to_format", choices=FORMATS)

    for name, help_text in (
        ("simple", "relay, upstream starts in the line format"),
        ("startjson", "relay, upstream starts with STARTJSON"),
    ):
        relay = sub.add_parser(name, help=help_text)
        relay.add_argument("listen_host")
        relay.add_argument("listen_port", type=int)
        relay.add_argument("connect_host")
        relay.add_argument("connect_port", type=int)
        relay.add_argument("--no-trace", action="store_true", help="do not log raw bytes")
        relay.add_argument(
            "--no-propagate",
            action="store_true",
            help="do not mirror a JSON switch onto the other leg",
        )
    return parser


async def run_relay(config: RelayConfig) -> None:
    """Serve until cancelled or until SIGINT/SIGTERM."""
    server = RelayServer(config)
    await server.start()
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):  # pragma: no cover - non-unix
            pass
    serve = asyncio.create_task(server.serve_forever())
    try:
        await stop.wait()
    finally:
        serve.cancel()
        await asyncio.gather(serve, return_exceptions=True)
        await server.close()


def run_converter(args: argparse.Namespace) -> int:
    try:
        convert_stream(sys.stdin.buffer, sys.stdout.buffer, args.from_format, args.to_format)
    except (DecodeError, EncodeError) as e:
        log_error("Conversion failed", e)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        print(HELPTEXT)
        return 0

    LoggerConfigurator().configure()

    if args.command == "parser":
        return run_converter(args)

    try:
        config = RelayConfig.from_args(args, start_json=args.command == "startjson")
    except ValidationError as e:
        logger.log_event(
            "app", "config_invalid", level=logging.ERROR, error=e.errors()[0]["msg"]
        )
        return 2

    logger.log_event("app", "start", **config.model_dump())
    try:
        asyncio.run(run_relay(config))
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted", level=logging.WARNING)
    finally:
        error_aggregator.log_summary_report()
        logger.log_event("app", "shutdown")
    return 0


if __name__ == "__main__":
    sys.exit(main())
