from __future__ import annotations

from argparse import Namespace
from typing import Any

from pydantic import BaseModel, Field, field_validator


class RelayConfig(BaseModel):
    """Settings for one listening relay.

    Attributes:
        listen_host: Interface to accept clients on.
        listen_port: Port to accept clients on (0 picks a free port).
        connect_host: Upstream IRC server host.
        connect_port: Upstream IRC server port.
        start_json: Open every upstream leg with STARTJSON instead of
            waiting for either side to ask for it.
        propagate_switch: When one leg switches to JSON, switch the other
            leg's send side as well.
        trace: Log every raw read and write.
    """

    listen_host: str
    listen_port: int = Field(ge=0, le=65535)
    connect_host: str
    connect_port: int = Field(ge=1, le=65535)
    start_json: bool = False
    propagate_switch: bool = True
    trace: bool = True

    @field_validator("listen_host", "connect_host", mode="before")
    @classmethod
    def validate_host(cls, v: Any) -> str:
        """Strip whitespace and reject empty host names."""
        if not isinstance(v, str):
            raise ValueError("host must be a string")
        stripped = v.strip()
        if not stripped:
            raise ValueError("host must not be empty")
        return stripped

    @classmethod
    def from_args(cls, args: Namespace, *, start_json: bool = False) -> RelayConfig:
        """Create a RelayConfig from parsed command-line arguments."""
        return cls(
            listen_host=args.listen_host,
            listen_port=args.listen_port,
            connect_host=args.connect_host,
            connect_port=args.connect_port,
            start_json=start_json,
            propagate_switch=not getattr(args, "no_propagate", False),
            trace=not getattr(args, "no_trace", False),
        )
