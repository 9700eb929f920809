"""Error taxonomy and logging helpers."""

from .handling import classify_error, log_error
from .internal import (
    ConfigError,
    ConnectError,
    DecodeError,
    ObserverError,
    QueryError,
    SinkError,
    StreamIOError,
)

__all__ = [
    "ObserverError",
    "ConnectError",
    "StreamIOError",
    "DecodeError",
    "QueryError",
    "SinkError",
    "ConfigError",
    "classify_error",
    "log_error",
]
