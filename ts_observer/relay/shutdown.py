"""Interrupt handling and shutdown escalation."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import Callable

from ..constants import FORCED_EXIT_CODE, MAX_INTERRUPTS

_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """Turns interrupts into a cancellation signal, then into a forced exit.

    The first interrupt sets ``cancel_event``. Reaching ``max_interrupts``, or
    any interrupt once the observer has finished and only the notifier drain
    is pending, calls ``force_exit`` without any cleanup.
    """

    def __init__(
        self,
        cancel_event: asyncio.Event,
        *,
        max_interrupts: int = MAX_INTERRUPTS,
        exit_code: int = FORCED_EXIT_CODE,
        force_exit: Callable[[int], object] = os._exit,
    ) -> None:
        self.cancel_event = cancel_event
        self.max_interrupts = max(1, max_interrupts)
        self.exit_code = exit_code
        self.force_exit = force_exit
        self.interrupts = 0
        self.draining = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._installed: list[signal.Signals] = []
        self._fallback_installed = False

    @property
    def shutdown_initiated(self) -> bool:
        return self.cancel_event.is_set()

    def handle_interrupt(self, signum: int = signal.SIGINT) -> None:
        self.interrupts += 1
        if self.draining or self.interrupts >= self.max_interrupts:
            logging.error(f"💀 Force exit program (signal={signum})")
            self.force_exit(self.exit_code)
            return
        logging.warning(f"🛑 Signal received - initiating shutdown (signal={signum})")
        self.cancel_event.set()

    def begin_drain(self) -> None:
        """Observer finished; the next interrupt escalates immediately."""
        self.draining = True

    def setup_signal_handlers(self) -> None:  # pragma: no cover
        """Route SIGINT/SIGTERM into ``handle_interrupt`` on the running loop."""
        self._loop = asyncio.get_running_loop()
        for sig in _SIGNALS:
            try:
                self._loop.add_signal_handler(sig, self.handle_interrupt, sig)
                self._installed.append(sig)
            except NotImplementedError:
                # Platforms without loop signal support
                signal.signal(sig, self._threadsafe_handler)
                self._fallback_installed = True

    def _threadsafe_handler(self, signum: int, _frame: object | None) -> None:  # pragma: no cover
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self.handle_interrupt, signum)

    def remove_signal_handlers(self) -> None:  # pragma: no cover
        if self._loop is not None:
            for sig in self._installed:
                self._loop.remove_signal_handler(sig)
        if self._fallback_installed:
            for sig in _SIGNALS:
                signal.signal(sig, signal.SIG_DFL)
        self._installed.clear()
        self._fallback_installed = False
