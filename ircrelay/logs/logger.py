"""Event logger used throughout the relay."""

from __future__ import annotations

import logging
import os

from ..constants import CONNECTION_LABEL_WIDTH
from . import event_catalog


class RelayLogger:
    """Thin wrapper that renders ``domain/action`` events onto a stdlib logger.

    Handlers are not attached here; ``LoggerConfigurator`` owns the root
    handler so every line shares the colorlog formatter.
    """

    def __init__(self, name: str = "ircrelay") -> None:
        # Fixed width for event name column when in debug (alignment)
        self._event_name_width = 32
        self.logger = logging.getLogger(name)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        event_name = f"{domain}_{action}".lower()
        human_text = human
        if human_text is None:
            template = event_catalog.EVENT_TEMPLATES.get((domain, action))
            if template:
                try:
                    human_text = template.format(**kwargs)
                except (KeyError, IndexError, ValueError):
                    human_text = template
            else:
                human_text = f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
                kwargs.setdefault("derived", True)
        self._log(level, event_name, human_text, exc_info=exc_info, **kwargs)

    def _log(
        self,
        level: int,
        event_name: str,
        human_text: str,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        kw: dict[str, object] = dict(kwargs)  # copy for mutation in extract
        connection, leg = self._extract_reserved(kw)
        prefix = self._build_prefix(connection, leg)
        if self._is_debug_enabled():
            msg = self._build_debug_message(
                event_name, prefix, human_text, kw, self._event_name_width
            )
        else:
            msg = f"{prefix} {human_text}"
        self.logger.log(level, msg, exc_info=exc_info)

    @staticmethod
    def _is_debug_enabled() -> bool:
        return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")

    @staticmethod
    def _extract_reserved(kwargs: dict[str, object]) -> tuple[str | None, str | None]:
        connection_o = kwargs.pop("connection", None)
        leg_o = kwargs.pop("leg", None)
        connection = str(connection_o) if connection_o is not None else None
        leg = str(leg_o) if leg_o is not None else None
        return connection, leg

    @staticmethod
    def _build_prefix(connection: str | None, leg: str | None) -> str:
        core = connection or "relay"
        if leg:
            core = f"{core}/{leg}"
        padded = core.ljust(CONNECTION_LABEL_WIDTH)[:CONNECTION_LABEL_WIDTH]
        return f"[{padded}]"

    @staticmethod
    def _build_debug_message(
        event_name: str,
        prefix: str,
        human_text: str,
        kwargs: dict[str, object],
        width: int,
    ) -> str:
        context = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        # Pad / truncate event name to a fixed column for alignment
        if len(event_name) <= width:
            ev = event_name.ljust(width)
        else:
            ev = event_name[: width - 1] + "…"
        base = f"{ev} {prefix} {human_text}"
        if context:
            base = f"{base} ({context})"
        return base


logger = RelayLogger()
