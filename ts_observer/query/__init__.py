"""ServerQuery protocol subsystem.

Contains the codec (escaping, records, status lines), the typed models and
the single-stream session.
"""

from .codec import (  # noqa: F401
    decode_records,
    decode_status,
    encode_command,
    escape,
    parse_query_string,
    split_lines,
    unescape,
)
from .models import ClientRecord, EnterEvent, LeftEvent, QueryStatus  # noqa: F401
from .session import QuerySession  # noqa: F401

__all__ = [
    "ClientRecord",
    "EnterEvent",
    "LeftEvent",
    "QueryStatus",
    "QuerySession",
    "decode_records",
    "decode_status",
    "encode_command",
    "escape",
    "unescape",
    "parse_query_string",
    "split_lines",
]
