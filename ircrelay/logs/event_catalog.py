"""Event template catalog.

``event_templates.json`` (next to this module) maps ``domain -> action ->
template``. ``audit_event_templates`` cross-checks it against the
``log_event(domain, action)`` calls in the package source.
"""

from __future__ import annotations

import ast
import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

EventKey = tuple[str, str]

EVENT_TEMPLATES: dict[EventKey, str] = {}
TEMPLATES_PATH = Path(__file__).with_name("event_templates.json")
PACKAGE_ROOT = Path(__file__).resolve().parent.parent


def _load_event_templates(path: Path | None = None) -> dict[EventKey, str]:
    """Read the catalog; non-string entries are skipped.

    A missing or unreadable file leaves a single ``app/load_error`` entry
    so the failure is visible the first time anything logs.
    """
    try:
        with (path or TEMPLATES_PATH).open("r", encoding="utf-8") as f:
            raw: Any = json.load(f)
    except FileNotFoundError:
        return {("app", "load_error"): "Event templates file missing"}
    except (OSError, ValueError) as e:
        return {("app", "load_error"): f"Failed to load event templates: {e}"[:200]}

    templates: dict[EventKey, str] = {}
    if not isinstance(raw, Mapping):
        return templates
    for domain, actions in raw.items():
        if not (isinstance(domain, str) and isinstance(actions, Mapping)):
            continue
        for action, template in actions.items():
            if isinstance(action, str) and isinstance(template, str):
                templates[(domain, action)] = template
    return templates


def reload_event_templates(path: Path | None = None) -> None:
    global EVENT_TEMPLATES  # noqa: PLW0603
    EVENT_TEMPLATES = _load_event_templates(path)


def _literal(node: ast.AST | None) -> set[str]:
    """String values a domain/action argument can take (both ternary branches)."""
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return {node.value}
    if isinstance(node, ast.IfExp):
        return _literal(node.body) | _literal(node.orelse)
    return set()


def _events_in_call(node: ast.Call) -> set[EventKey]:
    domain = node.args[0] if node.args else None
    action = node.args[1] if len(node.args) > 1 else None
    for kw in node.keywords:
        if kw.arg == "domain":
            domain = kw.value
        elif kw.arg == "action":
            action = kw.value
    return {(d, a) for d in _literal(domain) for a in _literal(action)}


def referenced_events(paths: Iterable[Path]) -> set[EventKey]:
    """Collect literal ``(domain, action)`` pairs passed to ``*.log_event``."""
    refs: set[EventKey] = set()
    for path in paths:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Attribute)
                and node.func.attr == "log_event"
            ):
                refs |= _events_in_call(node)
    return refs


def audit_event_templates(
    root: Path | None = None, path: Path | None = None
) -> tuple[set[EventKey], set[EventKey]]:
    """Return ``(missing, unused)`` comparing source references with the catalog.

    ``missing`` events would be logged with derived text; ``unused``
    templates are never emitted.
    """
    refs = referenced_events(sorted((root or PACKAGE_ROOT).rglob("*.py")))
    catalog = set(_load_event_templates(path))
    return refs - catalog, catalog - refs


reload_event_templates()

__all__ = [
    "EVENT_TEMPLATES",
    "audit_event_templates",
    "referenced_events",
    "reload_event_templates",
]
