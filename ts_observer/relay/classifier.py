"""Turns raw frames into notifications while keeping the client cache current."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from ..logs.logger import logger
from ..query.codec import decode_model, split_lines
from ..query.models import ClientRecord, EnterEvent, LeftEvent
from .cache import ClientCache
from .formatting import now_timestamp
from .messages import EnterNotification, LeftNotification, NotificationMessage

ENTER_PREFIX = "notifycliententerview"
LEFT_PREFIX = "notifyclientleftview"
SERVER_QUERY_UID = "ServerQuery"


class EventClassifier:
    def __init__(
        self,
        cache: ClientCache,
        ignore_list: Iterable[str] = (),
        clock: Callable[[], str] = now_timestamp,
    ) -> None:
        self.cache = cache
        self.ignore_list = frozenset(ignore_list)
        self.clock = clock

    def is_ignored(self, event: EnterEvent) -> bool:
        return (
            event.unique_identifier == SERVER_QUERY_UID
            or event.nickname in self.ignore_list
            or event.unique_identifier in self.ignore_list
        )

    def is_record_ignored(self, record: ClientRecord) -> bool:
        return record.nickname in self.ignore_list

    def classify(self, frame: str) -> Iterator[NotificationMessage]:
        """Yield notifications for each event line of ``frame``, in order.

        Lazy, so the caller can enqueue each message before the next line is
        decoded. A malformed event line raises ``DecodeError``.
        """
        timestamp = self.clock()
        for line in split_lines(frame):
            if line.startswith(ENTER_PREFIX):
                message = self._on_enter(line, timestamp)
            elif line.startswith(LEFT_PREFIX):
                message = self._on_left(line, timestamp)
            else:
                continue
            if message is not None:
                yield message

    def _on_enter(self, line: str, timestamp: str) -> EnterNotification | None:
        event = decode_model(line, EnterEvent)
        ignored = self.is_ignored(event)
        previous = self.cache.on_enter(event, ignored)
        if previous is not None:
            logger.log_event(
                "relay",
                "client_reentered",
                level=logging.DEBUG,
                client_id=event.client_id,
                nickname=previous.nickname,
            )
        if ignored:
            logger.log_event(
                "relay",
                "enter_ignored",
                level=logging.DEBUG,
                client_id=event.client_id,
                nickname=event.nickname,
            )
            return None
        logger.log_event(
            "relay", "client_entered", client_id=event.client_id, nickname=event.nickname
        )
        return EnterNotification(
            timestamp=timestamp,
            client_id=event.client_id,
            unique_identifier=event.unique_identifier,
            nickname=event.nickname,
            country=event.country,
        )

    def _on_left(self, line: str, timestamp: str) -> LeftNotification | None:
        event = decode_model(line, LeftEvent)
        entry = self.cache.on_left(event.client_id)
        if entry is None:
            logger.log_event(
                "relay", "unknown_client", level=logging.WARNING, client_id=event.client_id
            )
            return None
        if entry.ignored:
            return None
        logger.log_event(
            "relay", "client_left", client_id=event.client_id, nickname=entry.nickname
        )
        return LeftNotification(
            timestamp=timestamp,
            client_id=event.client_id,
            nickname=entry.nickname,
            reason=event.reason,
        )
