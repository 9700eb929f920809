"""Human-readable templates for ``logger.log_event``, keyed by (domain, action)."""

from __future__ import annotations

import json
from pathlib import Path

TEMPLATES_FILE = "event_templates.json"

EVENT_TEMPLATES: dict[tuple[str, str], str] = {}


def load_event_templates(path: Path | None = None) -> dict[tuple[str, str], str]:
    """Flatten ``{"domain": {"action": "template"}}`` into a lookup table.

    A missing or unreadable catalog never breaks logging: the result then holds
    a single ``("app", "load_error")`` entry describing the problem.
    """
    source = path or Path(__file__).with_name(TEMPLATES_FILE)
    try:
        document = json.loads(source.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {("app", "load_error"): f"Event templates file missing: {source.name}"}
    except (OSError, ValueError) as e:
        return {("app", "load_error"): f"Failed to load event templates: {e}"[:200]}
    if not isinstance(document, dict):
        return {}
    return {
        (domain, action): template
        for domain, actions in document.items()
        if isinstance(actions, dict)
        for action, template in actions.items()
        if isinstance(template, str)
    }


def reload_event_templates(path: Path | None = None) -> None:
    # Updated in place so modules holding a reference see the new templates
    templates = load_event_templates(path)
    EVENT_TEMPLATES.clear()
    EVENT_TEMPLATES.update(templates)


reload_event_templates()

__all__ = ["EVENT_TEMPLATES", "TEMPLATES_FILE", "load_event_templates", "reload_event_templates"]
