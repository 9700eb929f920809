"""Observer task: drives the query session and feeds the notification queue."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto
from typing import Protocol

from ..errors.internal import ObserverError
from ..logs.logger import logger
from ..query.models import ClientRecord
from .classifier import EventClassifier
from .keepalive import LivenessFlag
from .messages import TERMINATE, NotificationMessage


class ObserverState(Enum):
    LISTING = auto()
    SUBSCRIBING = auto()
    POLLING = auto()
    DRAINING = auto()
    TERMINATED = auto()


class ObservedSession(Protocol):
    async def list_clients(self) -> list[ClientRecord]: ...

    async def register_events(self) -> None: ...

    async def read_frame(self) -> str | None: ...

    async def keepalive(self) -> None: ...

    async def logout(self) -> None: ...


class ObserverTask:  # pylint: disable=too-many-instance-attributes
    """Listing -> Subscribing -> Polling -> Draining -> Terminated.

    Whatever way polling ends (cancellation or a fatal error), the drain step
    still runs: a best-effort logout, then exactly one ``TERMINATE`` on the
    queue so the notifier can finish.
    """

    def __init__(
        self,
        session: ObservedSession,
        queue: asyncio.Queue[NotificationMessage],
        cancel_event: asyncio.Event,
        liveness: LivenessFlag,
        classifier: EventClassifier,
        poll_interval: float,
    ) -> None:
        self.session = session
        self.queue = queue
        self.cancel_event = cancel_event
        self.liveness = liveness
        self.classifier = classifier
        self.poll_interval = poll_interval
        self.state: ObserverState | None = None
        self.enqueued = 0

    def _set_state(self, new_state: ObserverState) -> None:
        if self.state != new_state:
            logger.log_event(
                "observer",
                "state_change",
                level=logging.DEBUG,
                old_state=self.state.name if self.state else "NEW",
                new_state=new_state.name,
            )
            self.state = new_state

    async def run(self) -> None:
        try:
            await self._list_clients()
            await self._subscribe()
            await self._poll()
        finally:
            await self._drain()

    async def _list_clients(self) -> None:
        self._set_state(ObserverState.LISTING)
        records = await self.session.list_clients()
        added = self.classifier.cache.seed(records, self.classifier.is_record_ignored)
        logger.log_event("observer", "cache_seeded", clients=added, listed=len(records))

    async def _subscribe(self) -> None:
        self._set_state(ObserverState.SUBSCRIBING)
        await self.session.register_events()

    async def _poll(self) -> None:
        self._set_state(ObserverState.POLLING)
        logger.log_event("observer", "polling_started", level=logging.DEBUG)
        while True:
            if self.cancel_event.is_set():
                logger.log_event("observer", "cancel_observed")
                return
            frame = await self.session.read_frame()
            if frame is None:
                # Cancellation may have arrived during the read; only logout follows it
                if not self.cancel_event.is_set() and await self.liveness.take():
                    await self.session.keepalive()
                continue
            for message in self.classifier.classify(frame):
                # Blocks while the queue is full, pacing us to the notifier
                await self.queue.put(message)
                self.enqueued += 1
            await asyncio.sleep(self.poll_interval)

    async def _drain(self) -> None:
        self._set_state(ObserverState.DRAINING)
        try:
            await self.session.logout()
        except (ObserverError, OSError) as e:
            logger.log_event(
                "observer", "logout_failed", level=logging.WARNING, error=str(e)
            )
        await self.queue.put(TERMINATE)
        self._set_state(ObserverState.TERMINATED)
        logger.log_event("observer", "terminated", enqueued=self.enqueued)
