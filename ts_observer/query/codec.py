"""Query protocol codec: escaping, key/value records, status lines.

Pure functions, no I/O. Responses are zero or more data lines followed by one
``error id=<int> msg=<escaped>`` status line. Records on a data line are
separated by ``|``; each record is a space separated list of ``key=value``
tokens (or bare ``key`` flags).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from ..errors.internal import DecodeError, QueryError
from .models import QueryStatus

COMMAND_TERMINATOR = "\r\n"
# Servers end every line with LF CR; CR LF is accepted as well
FRAME_TERMINATORS = ("\n\r", "\r\n")
STATUS_PREFIX = "error "
STATUS_MARKER = "error id="
RECORD_SEPARATOR = "|"

_ESCAPES = {
    "\\": "\\\\",
    "/": "\\/",
    " ": "\\s",
    "|": "\\p",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}
_UNESCAPES = {escaped[1]: raw for raw, escaped in _ESCAPES.items()}

ModelT = TypeVar("ModelT", bound=BaseModel)


def escape(value: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def unescape(value: str) -> str:
    """Reverse ``escape``; unknown or dangling escape sequences are rejected."""
    if "\\" not in value:
        return value
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        code = next(chars, None)
        if code is None:
            raise DecodeError("Dangling escape at end of value", data={"value": value})
        try:
            out.append(_UNESCAPES[code])
        except KeyError:
            raise DecodeError(
                f"Unknown escape sequence \\{code}", data={"value": value}
            ) from None
    return "".join(out)


def parse_query_string(text: str) -> dict[str, str]:
    """Decode one record (``k=v k2=v2 flag``) into a dict of unescaped values."""
    fields: dict[str, str] = {}
    for token in text.split(" "):
        if not token:
            continue
        key, sep, raw = token.partition("=")
        if not key:
            raise DecodeError("Empty key in query string", data={"token": token})
        fields[key] = unescape(raw) if sep else ""
    return fields


def decode_model(text: str, model: type[ModelT]) -> ModelT:
    fields = parse_query_string(text)
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        raise DecodeError(
            f"Cannot decode {model.__name__}: {e.error_count()} invalid field(s)",
            data={"record": text},
        ) from e


def _format_arg(value: object) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return escape(str(value))


def encode_command(
    name: str, *args: object, options: Mapping[str, object] | None = None
) -> bytes:
    """Build one terminated command line.

    Positional ``args`` are escaped and appended in order, ``options`` are
    appended as ``key=value``. Escaping guarantees no argument can carry the
    terminator.
    """
    if not name or any(ch in name for ch in " \r\n|"):
        raise ValueError(f"Invalid command name: {name!r}")
    parts = [name]
    parts.extend(_format_arg(arg) for arg in args)
    for key, value in (options or {}).items():
        if not key or any(ch in key for ch in " =\r\n|"):
            raise ValueError(f"Invalid option name: {key!r}")
        parts.append(f"{key}={_format_arg(value)}")
    return (" ".join(parts) + COMMAND_TERMINATOR).encode("utf-8")


def split_lines(text: str) -> list[str]:
    """Split a frame into lines, tolerating both LF CR and CR LF endings.

    A blank line in the middle of a frame is preserved (it is a present but
    empty result line); only the empty tail after the last terminator is
    dropped.
    """
    lines = [piece.strip("\r") for piece in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def is_status_line(line: str) -> bool:
    return line.lstrip().startswith(STATUS_PREFIX)


def parse_status_line(line: str) -> QueryStatus:
    _, _, body = line.lstrip().partition(STATUS_PREFIX)
    return decode_model(body, QueryStatus)


def decode_status(response: str) -> QueryStatus:
    """Find and decode the status line of a response.

    Returns the status on success. Raises ``QueryError`` for a non-zero status
    and ``DecodeError`` when no status line exists or it is malformed.
    """
    for line in split_lines(response):
        if is_status_line(line):
            status = parse_status_line(line)
            if not status.ok:
                raise QueryError.from_status(status)
            return status
    raise DecodeError("No status line in response", data={"response": response})


def decode_records(response: str, model: type[ModelT]) -> list[ModelT] | None:
    """Decode the first data line of a successful response into records.

    The status is checked first so a failed command never yields stale data.
    Returns ``None`` when the response holds no data line at all, and an
    empty list when the data line is present but blank.
    """
    decode_status(response)
    for line in split_lines(response):
        if is_status_line(line):
            continue
        if not line.strip():
            return []
        return [decode_model(chunk, model) for chunk in line.split(RECORD_SEPARATOR)]
    return None


def is_frame_complete(buffer: bytes) -> bool:
    """Status marker present and the buffer ends on a line terminator."""
    if STATUS_MARKER.encode() not in buffer:
        return False
    return any(buffer.endswith(term.encode()) for term in FRAME_TERMINATORS)
