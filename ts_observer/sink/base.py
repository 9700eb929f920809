"""Downstream notification sink contract."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class NotificationSink(Protocol):
    async def send(self, text: str) -> None:
        """Deliver ``text``; raise ``SinkError`` on failure."""
        ...


class NullSink:
    """Accepts and drops every message (used when no bot token is configured)."""

    def __init__(self) -> None:
        self.dropped = 0

    async def send(self, text: str) -> None:
        self.dropped += 1
        logging.debug(f"🔇 Notification dropped (no sink configured): {text}")
