"""Structured event logger for protocol and relay events."""

from __future__ import annotations

import logging
import os

from .event_catalog import EVENT_TEMPLATES

EVENT_COLUMN_WIDTH = 32


def debug_enabled() -> bool:
    return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")


class EventLogger:
    """Emits one log line per (domain, action) event.

    Normal mode logs only the rendered template. With ``DEBUG`` set the line
    starts with the event name in a fixed column and ends with every field.
    """

    def __init__(self, name: str = "ts_observer") -> None:
        self.logger = logging.getLogger(name)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **fields: object,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        text = human if human is not None else self.render(domain, action, fields)
        if debug_enabled():
            text = self._with_context(f"{domain}_{action}".lower(), text, fields)
        self.logger.log(level, text, exc_info=exc_info)

    @staticmethod
    def render(domain: str, action: str, fields: dict[str, object]) -> str:
        template = EVENT_TEMPLATES.get((domain, action))
        if template is None:
            return f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
        try:
            return template.format(**fields)
        except (KeyError, IndexError, ValueError):
            # Missing field: show the template rather than drop the event
            return template

    @staticmethod
    def _with_context(event_name: str, text: str, fields: dict[str, object]) -> str:
        if len(event_name) > EVENT_COLUMN_WIDTH:
            event_name = event_name[: EVENT_COLUMN_WIDTH - 1] + "…"
        line = f"{event_name:<{EVENT_COLUMN_WIDTH}} {text}"
        if fields:
            line += " (" + ", ".join(f"{k}={v!r}" for k, v in fields.items()) + ")"
        return line


logger = EventLogger()
