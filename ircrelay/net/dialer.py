"""Outbound (server-facing) connection setup using Tenacity."""

from __future__ import annotations

import asyncio
import logging

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    DIAL_BACKOFF_MAX_SECONDS,
    DIAL_MAX_ATTEMPTS,
    DIAL_TIMEOUT_SECONDS,
)
from ..errors import TransportFault
from ..logs.logger import logger


async def dial_upstream(
    host: str,
    port: int,
    *,
    connection: str | None = None,
    max_attempts: int = DIAL_MAX_ATTEMPTS,
    timeout: float = DIAL_TIMEOUT_SECONDS,
    backoff_max: float = DIAL_BACKOFF_MAX_SECONDS,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open the upstream leg, retrying with exponential backoff.

    Raises:
        TransportFault: once every attempt has failed or timed out.
    """

    def before_attempt(retry_state):
        logger.log_event(
            "dial", "attempt", level=logging.DEBUG, connection=connection,
            host=host, port=port, attempt=retry_state.attempt_number,
        )

    def after_attempt(retry_state):
        if retry_state.outcome.failed:
            logger.log_event(
                "dial", "failed", level=logging.WARNING, connection=connection,
                host=host, port=port, error=repr(retry_state.outcome.exception()),
            )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=0.5, max=backoff_max),
        retry=retry_if_exception_type((OSError, TimeoutError)),
        before=before_attempt,
        after=after_attempt,
    )

    async def open_once() -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        return await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )

    try:
        return await retrying(open_once)
    except RetryError as e:
        final = e.last_attempt.exception()
        raise TransportFault(
            f"could not connect to {host}:{port} after {max_attempts} attempts",
            data={"host": host, "port": port, "error": repr(final)},
        ) from final
