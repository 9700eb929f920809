"""Relay pipeline: observer, notifier and keepalive watchdog wiring."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Iterable

from ..constants import KEEPALIVE_INTERVAL_SECONDS, NOTIFY_QUEUE_SIZE
from ..errors.handling import log_error
from ..sink.base import NotificationSink
from .cache import ClientCache
from .classifier import EventClassifier
from .keepalive import KeepaliveWatchdog, LivenessFlag
from .messages import NotificationMessage, Terminate
from .notifier import NotifierTask
from .observer import ObservedSession, ObserverTask
from .shutdown import ShutdownCoordinator


class RelayPipeline:  # pylint: disable=too-many-instance-attributes
    """Runs the observer and notifier tasks connected by a bounded queue.

    Attributes:
        queue: Bounded FIFO of notification messages.
        cancel_event: Set once to ask the observer to drain.
        liveness: Flag raised by the watchdog, consumed by the observer.
        coordinator: Interrupt handling for this run.
    """

    def __init__(
        self,
        session: ObservedSession,
        sink: NotificationSink,
        *,
        ignore_list: Iterable[str] = (),
        poll_interval_ms: int = 20,
        queue_size: int = NOTIFY_QUEUE_SIZE,
        keepalive_interval: float = KEEPALIVE_INTERVAL_SECONDS,
        coordinator: ShutdownCoordinator | None = None,
        install_signal_handlers: bool = True,
    ) -> None:
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")
        self.queue: asyncio.Queue[NotificationMessage] = asyncio.Queue(maxsize=queue_size)
        self.cancel_event = coordinator.cancel_event if coordinator else asyncio.Event()
        self.coordinator = coordinator or ShutdownCoordinator(self.cancel_event)
        self.install_signal_handlers = install_signal_handlers
        self.liveness = LivenessFlag()
        self.cache = ClientCache()
        self.classifier = EventClassifier(self.cache, ignore_list)
        self.observer = ObserverTask(
            session,
            self.queue,
            self.cancel_event,
            self.liveness,
            self.classifier,
            poll_interval=poll_interval_ms / 1000,
        )
        self.notifier = NotifierTask(self.queue, sink)
        self.watchdog = KeepaliveWatchdog(self.liveness, keepalive_interval)

    def stop(self) -> None:
        self.cancel_event.set()

    async def run(self) -> None:
        """Run until the observer terminates and the queue has been drained.

        If the notifier stops before the observer, the observer is cancelled
        and the queue is emptied without delivery so it can still reach
        ``Terminated``.

        Raises:
            Exception: The observer's fatal error, else the notifier's,
                re-raised once both sides have finished.
        """
        if self.install_signal_handlers:
            self.coordinator.setup_signal_handlers()
        observer_task = asyncio.create_task(self.observer.run(), name="observer")
        notifier_task = asyncio.create_task(self.notifier.run(), name="notifier")
        watchdog_task = asyncio.create_task(self.watchdog.run(), name="keepalive")
        discard_task: asyncio.Task[int] | None = None
        observer_error: BaseException | None = None
        notifier_error: BaseException | None = None
        try:
            logging.info("🏃 Observer running - press Ctrl+C to stop")
            await asyncio.wait(
                {observer_task, notifier_task}, return_when=asyncio.FIRST_COMPLETED
            )
            if notifier_task.done() and not observer_task.done():
                notifier_error = notifier_task.exception()
                self._report_notifier_stopped(notifier_error)
                self.cancel_event.set()
                discard_task = asyncio.create_task(self._discard_queue(), name="discard")
            try:
                await observer_task
            except Exception as e:  # noqa: BLE001
                observer_error = e
            finally:
                watchdog_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await watchdog_task
            self.coordinator.begin_drain()
            if discard_task is not None:
                await discard_task
            else:
                try:
                    await notifier_task
                except Exception as e:  # noqa: BLE001
                    notifier_error = e
                    self._report_notifier_stopped(e)
        finally:
            for task in (observer_task, notifier_task, discard_task):
                if task is not None and not task.done():
                    task.cancel()
            if self.install_signal_handlers:
                self.coordinator.remove_signal_handlers()
        if observer_error is not None:
            raise observer_error
        if notifier_error is not None:
            raise notifier_error

    async def _discard_queue(self) -> int:
        """Consume messages without delivery until ``TERMINATE``."""
        dropped = 0
        while True:
            message = await self.queue.get()
            self.queue.task_done()
            if isinstance(message, Terminate):
                break
            dropped += 1
        if dropped:
            logging.warning(f"⚠️ Dropped {dropped} undelivered notification(s)")
        return dropped

    @staticmethod
    def _report_notifier_stopped(error: BaseException | None) -> None:
        if error is None:
            logging.error("💥 Notifier stopped before the observer terminated")
        else:
            log_error("Notifier stopped unexpectedly", error)
