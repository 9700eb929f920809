"""Messages carried by the observer -> notifier queue.

The set of variants is closed: ``EnterNotification``, ``LeftNotification``
and the ``TERMINATE`` sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class EnterNotification:
    timestamp: str
    client_id: int
    unique_identifier: str
    nickname: str
    country: str


@dataclass(frozen=True, slots=True)
class LeftNotification:
    timestamp: str
    client_id: int
    nickname: str
    reason: str


@dataclass(frozen=True, slots=True)
class Terminate:
    """Tells the notifier to stop; never formatted."""


TERMINATE: Final = Terminate()

NotificationMessage = EnterNotification | LeftNotification | Terminate
