"""Notification sinks."""

from .base import NotificationSink, NullSink
from .telegram import TelegramSink

__all__ = ["NotificationSink", "NullSink", "TelegramSink"]
