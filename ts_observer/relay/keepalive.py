"""Liveness flag and the periodic watchdog that raises it."""

from __future__ import annotations

import asyncio
import logging

from ..constants import KEEPALIVE_INTERVAL_SECONDS
from ..logs.logger import logger


class LivenessFlag:
    """Mutex-guarded boolean shared by the watchdog and the observer."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._value = False

    async def raise_flag(self) -> None:
        async with self._lock:
            self._value = True

    async def take(self) -> bool:
        """Return the current value and clear it."""
        async with self._lock:
            value, self._value = self._value, False
            return value

    async def is_set(self) -> bool:
        async with self._lock:
            return self._value


class KeepaliveWatchdog:
    def __init__(
        self, flag: LivenessFlag, interval: float = KEEPALIVE_INTERVAL_SECONDS
    ) -> None:
        self.flag = flag
        self.interval = interval

    async def run(self) -> None:
        """Raise the flag every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(self.interval)
            await self.flag.raise_flag()
            logger.log_event("keepalive", "due", level=logging.DEBUG)
