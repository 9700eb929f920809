"""
Process-wide logging setup for the observer.

``LoggerConfigurator`` installs one colorlog handler on the root logger.
``log_structured_error`` is the single funnel for error lines; every call is
also counted per category so a summary can be printed when the process exits.
"""

import atexit
import logging
import os
import sys
import threading
from collections import Counter
from typing import Any

import colorlog

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}
# Third-party loggers that only matter when something breaks
QUIET_LOGGERS = ("aiohttp", "asyncio")


class ErrorAggregator:
    """Counts structured errors per category and keeps the latest message of each."""

    def __init__(self):
        self.counts: Counter[str] = Counter()
        self.last: dict[str, dict[str, Any]] = {}
        self.lock = threading.Lock()

    def record_error(self, error_type: str, message: str, context: dict[str, Any] = None) -> None:
        with self.lock:
            self.counts[error_type] += 1
            self.last[error_type] = {"message": message, "context": dict(context or {})}

    def get_error_summary(self) -> dict[str, Any]:
        with self.lock:
            return {
                error_type: {"total_count": count, "last_occurrence": self.last.get(error_type)}
                for error_type, count in self.counts.most_common()
            }

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.debug("No errors recorded in current session")
            return
        logging.warning("🚨 Error summary for this run")
        for error_type, stats in summary.items():
            last = stats["last_occurrence"]
            logging.warning(f"  {error_type}: {stats['total_count']} (last: {last['message']})")


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException = None,
    context: dict[str, Any] = None,
    level: int = logging.ERROR
) -> None:
    """Log ``[TYPE] message | Exception: ... | Context: k=v`` and count it.

    Args:
        error_type: Category of the error (network, query, decode, sink, config...)
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Root logger setup; level comes from the ``DEBUG`` environment variable."""

    def __init__(self, config=None):
        self.config = config or {}
        self._summary_registered = False

    @staticmethod
    def resolve_level() -> int:
        debug_env = os.environ.get("DEBUG", "").lower()
        return logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

    def build_handler(self) -> logging.Handler:
        handler = logging.StreamHandler(self.config.get("stream", sys.stderr))
        handler.setFormatter(
            colorlog.ColoredFormatter(
                LOG_FORMAT,
                datefmt=DATE_FORMAT,
                log_colors=LEVEL_COLORS,
                secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
                reset=True,
            )
        )
        return handler

    def configure(self):
        log_level = self.resolve_level()
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(self.build_handler())
        root_logger.setLevel(log_level)
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        if not self._summary_registered:
            atexit.register(error_aggregator.log_summary_report)
            self._summary_registered = True
