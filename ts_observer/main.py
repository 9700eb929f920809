#!/usr/bin/env python3
"""
Main entry point for the TeamSpeak observer
"""

import asyncio
import logging
import sys

from .application_context import ApplicationContext
from .config import ObserverConfig, load_config
from .constants import DEFAULT_CONFIG_FILE
from .errors.handling import log_error
from .errors.internal import ConfigError, ObserverError
from .logging_config import LoggerConfigurator
from .query.session import QuerySession
from .relay.pipeline import RelayPipeline

USAGE = "usage: ts-observer [CONFIG_FILE]"


async def init_connection(config: ObserverConfig) -> QuerySession:
    """Connect, log in and select the virtual server.

    Raises:
        ObserverError: The failing step is logged before re-raising; the
            stream is closed.
    """
    raw = config.raw_query
    session = await QuerySession.connect(raw.server, raw.port)
    step = "Login"
    try:
        await session.login(raw.user, raw.password)
        step = "Select server id"
        await session.select_server(config.server.server_id)
    except ObserverError as e:
        log_error(f"{step} failed", e)
        await session.close()
        raise
    return session


async def main(config_file: str = DEFAULT_CONFIG_FILE) -> int:
    """Load configuration, connect and run the relay until shutdown.

    Returns:
        Process exit code: 0 on clean shutdown, 1 on a fatal error.
    """
    try:
        config = load_config(config_file)
    except ConfigError as e:
        log_error("Configuration error", e)
        return 1

    try:
        session = await init_connection(config)
    except ObserverError as e:
        log_error("Startup failed", e)
        return 1

    context = await ApplicationContext.create(config.telegram)
    try:
        pipeline = RelayPipeline(
            session,
            context.sink,
            ignore_list=config.server.ignore_user,
            poll_interval_ms=config.misc.interval,
        )
        await pipeline.run()
    except asyncio.CancelledError:
        raise
    except Exception as e:  # noqa: BLE001
        log_error("Observer terminated with error", e)
        return 1
    finally:
        await session.close()
        await context.shutdown()
    logging.info("👋 Goodbye")
    return 0


def parse_args(argv: list[str]) -> str:
    """Return the configuration path from an optional single positional argument."""
    if len(argv) > 1 or (argv and argv[0].startswith("-")):
        print(USAGE, file=sys.stderr)
        sys.exit(2)
    return argv[0] if argv else DEFAULT_CONFIG_FILE


def run(argv: list[str] | None = None) -> None:
    """Synchronous entry point for the application.

    Raises:
        SystemExit: Always, carrying the exit code from ``main``.
    """
    config_file = parse_args(sys.argv[1:] if argv is None else argv)
    LoggerConfigurator().configure()
    try:
        code = asyncio.run(main(config_file))
    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as e:  # noqa: BLE001
        log_error("Top-level error", e)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    run()
