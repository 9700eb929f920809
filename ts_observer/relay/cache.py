"""In-memory map of connected clients, owned by the observer task."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..query.models import ClientRecord, EnterEvent


@dataclass(frozen=True, slots=True)
class CacheEntry:
    nickname: str
    ignored: bool = False


class ClientCache:
    """clientId -> (nickname, ignored).

    An id is present from its listing/enter until its matching left event.
    No locking: only the observer task touches it.
    """

    def __init__(self) -> None:
        self._entries: dict[int, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._entries

    def get(self, client_id: int) -> CacheEntry | None:
        return self._entries.get(client_id)

    def seed(
        self,
        records: Iterable[ClientRecord],
        is_ignored: Callable[[ClientRecord], bool] | None = None,
    ) -> int:
        """Bulk-populate from a client listing, skipping query clients.

        The first record wins when an id is listed twice. Returns the number
        of entries added.
        """
        added = 0
        for record in records:
            if record.is_query_client or record.client_id in self._entries:
                continue
            ignored = bool(is_ignored(record)) if is_ignored else False
            self._entries[record.client_id] = CacheEntry(record.nickname, ignored)
            added += 1
        return added

    def on_enter(self, event: EnterEvent, ignored: bool) -> CacheEntry | None:
        previous = self._entries.get(event.client_id)
        self._entries[event.client_id] = CacheEntry(event.nickname, ignored)
        return previous

    def on_left(self, client_id: int) -> CacheEntry | None:
        return self._entries.pop(client_id, None)

    def snapshot(self) -> dict[int, CacheEntry]:
        return dict(self._entries)
