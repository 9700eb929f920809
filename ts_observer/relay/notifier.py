"""Notifier task: drains the queue into the external sink."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from ..errors.handling import log_error
from ..errors.internal import SinkError
from ..logs.logger import logger
from ..sink.base import NotificationSink
from .formatting import format_notification
from .messages import NotificationMessage, Terminate


class NotifierTask:
    def __init__(
        self,
        queue: asyncio.Queue[NotificationMessage],
        sink: NotificationSink,
        formatter: Callable[[NotificationMessage], str] = format_notification,
    ) -> None:
        self.queue = queue
        self.sink = sink
        self.formatter = formatter
        self.delivered = 0
        self.failed = 0

    async def run(self) -> None:
        """Deliver messages in FIFO order until the ``TERMINATE`` sentinel.

        A failed delivery, whatever the cause, is logged and the loop moves on
        to the next message.
        """
        while True:
            message = await self.queue.get()
            try:
                if isinstance(message, Terminate):
                    break
                await self._deliver(message)
            finally:
                self.queue.task_done()
        logger.log_event(
            "notifier",
            "exiting",
            level=logging.DEBUG,
            delivered=self.delivered,
            failed=self.failed,
        )

    async def _deliver(self, message: NotificationMessage) -> None:
        try:
            await self.sink.send(self.formatter(message))
        except SinkError as e:
            self.failed += 1
            log_error("Got error in send message", e)
            return
        except Exception as e:  # noqa: BLE001
            self.failed += 1
            log_error(
                "Unexpected error in send message",
                e,
                {"notification": type(message).__name__},
            )
            return
        self.delivered += 1
