"""Diagnostic sink for raw bytes crossing a relayed connection.

Reads are logged as ``C >> b'...'`` and writes as ``C << b'...'``; ``C`` is
the client-facing leg, ``S`` the server-facing one.
"""

from __future__ import annotations

import logging

from ..logs.logger import logger


class WireTap:
    def __init__(self, connection: str | None = None, level: int = logging.INFO) -> None:
        self.connection = connection
        self.level = level

    def read(self, label: str, data: bytes) -> None:
        logger.log_event(
            "wire", "read", level=self.level, connection=self.connection,
            label=label, data=repr(data),
        )

    def write(self, label: str, data: bytes) -> None:
        logger.log_event(
            "wire", "write", level=self.level, connection=self.connection,
            label=label, data=repr(data),
        )
