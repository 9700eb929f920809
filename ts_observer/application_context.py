"""Lifecycle of the notification sink and the HTTP session behind it."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from .config.model import TelegramConfig
from .sink.base import NotificationSink, NullSink
from .sink.telegram import TelegramSink


class ApplicationContext:
    """Owns the aiohttp session (if any) and the sink the notifier writes to.

    Attributes:
        session: Shared HTTP session, ``None`` when delivery is disabled.
        sink: Destination for formatted notifications.
    """

    session: aiohttp.ClientSession | None
    sink: NotificationSink | None

    def __init__(self) -> None:
        self.session = None
        self.sink = None
        self._shutdown_lock = asyncio.Lock()

    @classmethod
    async def create(cls, telegram: TelegramConfig) -> ApplicationContext:
        """Build the sink for ``telegram``.

        An empty bot token yields a ``NullSink``: events are still consumed and
        dropped, so the relay behaves the same with or without delivery.
        """
        ctx = cls()
        if not telegram.enabled:
            logging.warning("⚠️ Token is empty, skipped all send message request")
            ctx.sink = NullSink()
            return ctx
        ctx.session = aiohttp.ClientSession()
        ctx.sink = TelegramSink(
            ctx.session,
            telegram.api_key,
            telegram.target,
            telegram.api_server,
        )
        logging.debug(f"📨 Telegram delivery to chat {telegram.target} enabled")
        return ctx

    async def shutdown(self) -> None:
        """Drop the sink and close the HTTP session; later calls do nothing."""
        async with self._shutdown_lock:
            session, self.session = self.session, None
            self.sink = None
            if session is None or session.closed:
                return
            try:
                await session.close()
            except (aiohttp.ClientError, OSError) as e:
                logging.error(f"💥 Error closing HTTP session: {e}")
            else:
                logging.debug("🔌 HTTP session closed")
