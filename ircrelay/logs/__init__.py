"""Project logging package.

Contains internal logging utilities (event catalog + RelayLogger). Avoid
importing stdlib logging through this package name externally.
"""

from .event_catalog import (  # noqa: F401
    EVENT_TEMPLATES,
    audit_event_templates,
    reload_event_templates,
)
from .logger import RelayLogger, logger  # noqa: F401

__all__ = [
    "RelayLogger",
    "logger",
    "EVENT_TEMPLATES",
    "audit_event_templates",
    "reload_event_templates",
]
