"""Event relay: client cache, classification, observer/notifier tasks."""

from .cache import CacheEntry, ClientCache  # noqa: F401
from .classifier import EventClassifier  # noqa: F401
from .formatting import country_flag, format_notification  # noqa: F401
from .keepalive import KeepaliveWatchdog, LivenessFlag  # noqa: F401
from .messages import (  # noqa: F401
    TERMINATE,
    EnterNotification,
    LeftNotification,
    NotificationMessage,
    Terminate,
)
from .notifier import NotifierTask  # noqa: F401
from .observer import ObserverState, ObserverTask  # noqa: F401
from .pipeline import RelayPipeline  # noqa: F401
from .shutdown import ShutdownCoordinator  # noqa: F401

__all__ = [
    "CacheEntry",
    "ClientCache",
    "EventClassifier",
    "country_flag",
    "format_notification",
    "KeepaliveWatchdog",
    "LivenessFlag",
    "TERMINATE",
    "EnterNotification",
    "LeftNotification",
    "NotificationMessage",
    "Terminate",
    "NotifierTask",
    "ObserverState",
    "ObserverTask",
    "RelayPipeline",
    "ShutdownCoordinator",
]
