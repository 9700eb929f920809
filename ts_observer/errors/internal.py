"""Exception types raised by the observer.

These exceptions give the protocol engine and the relay pipeline semantic
categories for propagation decisions. Raw ``OSError`` / ``aiohttp`` /
``pydantic`` errors never cross a module boundary unwrapped.

Classes:
  ObserverError   – Base for all internal errors.
  ConnectError    – The query stream could not be established.
  StreamIOError   – Read/write failure on an established stream.
  DecodeError     – Malformed protocol text (contract violation).
  QueryError      – Protocol-level command failure (non-zero status).
  SinkError       – Notification delivery failure.
  ConfigError     – Configuration file missing or invalid.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ..query.models import QueryStatus


class ObserverError(Exception):
    """Root of every error the observer raises on purpose.

    Attributes:
        data: Structured fields (peer, command, status...) that ``log_error``
            writes next to the message.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        self.data = dict(data or {})


class ConnectError(ObserverError):
    """Exception raised when the TCP stream to the query port cannot be opened."""


class StreamIOError(ObserverError):
    """Exception raised for read/write failures on an established stream.

    Fatal to the observer task; the connection is not resumed.
    """


class DecodeError(ObserverError):
    """Exception raised for malformed protocol text.

    Indicates a contract violation by the server (missing status line, bad
    escape sequence, record fields that do not fit the expected model).
    """


class QueryError(ObserverError):
    """Protocol-level failure of a single command.

    Carries the numeric status ``code`` and the unescaped server ``message``.
    Two synthetic codes exist for failures that never produced a status:
    ``EMPTY_RESPONSE`` and ``LOCAL_ERROR``.
    """

    EMPTY_RESPONSE = -1
    LOCAL_ERROR = -2

    def __init__(
        self,
        code: int,
        message: str,
        *,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, data=data)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.message}({self.code})"

    @classmethod
    def from_status(cls, status: QueryStatus) -> QueryError:
        return cls(status.code, status.message)

    @classmethod
    def from_exception(cls, error: BaseException) -> QueryError:
        """Project a lower-level failure (I/O, decode) onto a QueryError."""
        return cls(cls.LOCAL_ERROR, str(error), data={"cause": type(error).__name__})

    @classmethod
    def empty_response(cls) -> QueryError:
        return cls(cls.EMPTY_RESPONSE, "Expect result but none found.")


class SinkError(ObserverError):
    """Exception raised when a notification cannot be delivered.

    Always logged by the notifier and never propagated.
    """


class ConfigError(ObserverError):
    """Exception raised when the configuration file cannot be loaded."""


__all__ = [
    "ObserverError",
    "ConnectError",
    "StreamIOError",
    "DecodeError",
    "QueryError",
    "SinkError",
    "ConfigError",
]
