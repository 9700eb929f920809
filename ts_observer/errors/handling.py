from __future__ import annotations

from ..logging_config import log_structured_error
from .internal import (
    ConfigError,
    ConnectError,
    DecodeError,
    ObserverError,
    QueryError,
    SinkError,
    StreamIOError,
)


def classify_error(error: BaseException) -> str:
    """Return the structured-log category for an exception."""
    if isinstance(error, ConnectError | StreamIOError | OSError | ConnectionError):
        return "network"
    if isinstance(error, DecodeError):
        return "decode"
    if isinstance(error, QueryError):
        return "query"
    if isinstance(error, SinkError):
        return "sink"
    if isinstance(error, ConfigError):
        return "config"
    if isinstance(error, ObserverError):
        return "internal"
    return "unknown"


def log_error(message: str, error: BaseException, context: dict | None = None) -> None:
    """Log ``message`` and ``error`` as one structured error line.

    The category comes from ``classify_error``. Fields attached to an
    ``ObserverError`` (``error.data``) are logged as context, with ``context``
    entries taking precedence on key clashes.
    """
    merged: dict = {}
    if isinstance(error, ObserverError):
        merged.update(error.data)
    if context:
        merged.update(context)
    log_structured_error(
        error_type=classify_error(error),
        message=f"{message}: {error}",
        exception=error,
        context=merged or None,
    )
