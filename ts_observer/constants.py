"""
Tuning constants and configuration defaults for the TeamSpeak observer.

Every tunable below reads an environment variable of the same name first, so a
deployment can adjust timeouts and sizes without touching the config file.
"""

import logging
import os
from collections.abc import Callable
from typing import TypeVar

_T = TypeVar("_T", int, float)


def _from_env(name: str, default: _T, parse: Callable[[str], _T]) -> _T:
    """Parsed value of ``$name``; the default when unset or unparsable."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        logging.warning(f"⚠️ Ignoring {name}={raw!r}: expected {parse.__name__}, using {default}")
        return default


def _get_env_int(name: str, default: int) -> int:
    return _from_env(name, default, int)


def _get_env_float(name: str, default: float) -> float:
    return _from_env(name, default, float)


# Query protocol framing
QUERY_READ_TIMEOUT_SECONDS = _get_env_float(
    "QUERY_READ_TIMEOUT_SECONDS", 2.0
)  # Per-read poll window; an empty window is "no frame yet", not an error
QUERY_READ_BUFFER_SIZE = _get_env_int(
    "QUERY_READ_BUFFER_SIZE", 512
)  # Chunk size; a shorter read ends the frame
QUERY_CONNECT_TIMEOUT_SECONDS = _get_env_float(
    "QUERY_CONNECT_TIMEOUT_SECONDS", 10.0
)  # TCP connect timeout
QUERY_KEEPALIVE_COMMAND = "whoami"  # Cheap identity query used as liveness check

# Relay pipeline
KEEPALIVE_INTERVAL_SECONDS = _get_env_float(
    "KEEPALIVE_INTERVAL_SECONDS", 30.0
)  # Period of the liveness watchdog
NOTIFY_QUEUE_SIZE = _get_env_int(
    "NOTIFY_QUEUE_SIZE", 4096
)  # Bounded observer -> notifier queue capacity
FORCED_EXIT_CODE = _get_env_int(
    "FORCED_EXIT_CODE", 137
)  # Exit code used when a repeated interrupt forces termination
MAX_INTERRUPTS = _get_env_int(
    "MAX_INTERRUPTS", 2
)  # Interrupt count that escalates to a forced exit

# Notification sink (Telegram Bot API)
HTTP_REQUEST_TIMEOUT_SECONDS = _get_env_int(
    "HTTP_REQUEST_TIMEOUT_SECONDS", 30
)  # Default HTTP request timeout
SINK_MAX_RETRY_ATTEMPTS = _get_env_int(
    "SINK_MAX_RETRY_ATTEMPTS", 3
)  # Attempts per notification on transient transport errors
RETRY_MAX_BACKOFF_SECONDS = _get_env_int(
    "RETRY_MAX_BACKOFF_SECONDS", 10
)  # Maximum backoff time in seconds

# Configuration defaults
DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_QUERY_HOST = "127.0.0.1"
DEFAULT_QUERY_PORT = 10011
DEFAULT_SERVER_ID = 1
DEFAULT_POLL_INTERVAL_MS = 20
DEFAULT_TELEGRAM_API_SERVER = "https://api.telegram.org/"
