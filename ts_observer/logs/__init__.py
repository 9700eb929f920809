"""Structured event logging: the ``logger.log_event`` API and its template catalog."""

from .event_catalog import EVENT_TEMPLATES, reload_event_templates
from .logger import EventLogger, logger

__all__ = ["EventLogger", "logger", "EVENT_TEMPLATES", "reload_event_templates"]
