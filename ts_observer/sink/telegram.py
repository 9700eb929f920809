"""Thin asynchronous Telegram Bot API client used by the notifier.

Wraps only ``sendMessage``; failures surface as ``SinkError``.
"""

from __future__ import annotations

import logging
from typing import Any

import aiohttp
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from ..constants import (
    DEFAULT_TELEGRAM_API_SERVER,
    HTTP_REQUEST_TIMEOUT_SECONDS,
    RETRY_MAX_BACKOFF_SECONDS,
    SINK_MAX_RETRY_ATTEMPTS,
)
from ..errors.internal import SinkError


class _TransientSinkError(SinkError):
    """Delivery failure worth another attempt (transport, 429, 5xx)."""


class TelegramSink:
    """Sends HTML-formatted messages to one chat through the Bot API.

    Attributes:
        target: Destination chat identifier.
        api_server: Base URL of the Bot API server.
    """

    PARSE_MODE = "HTML"

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        target: int,
        api_server: str = DEFAULT_TELEGRAM_API_SERVER,
        *,
        max_attempts: int = SINK_MAX_RETRY_ATTEMPTS,
        timeout: float = HTTP_REQUEST_TIMEOUT_SECONDS,
        wait: wait_base | None = None,
    ) -> None:
        if not session:
            raise ValueError("aiohttp session required")
        if not api_key:
            raise ValueError("api_key required")
        self._session = session
        self._api_key = api_key
        self.target = target
        self.api_server = api_server
        self.max_attempts = max(1, max_attempts)
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._wait = wait or wait_exponential(multiplier=1, max=RETRY_MAX_BACKOFF_SECONDS)

    @property
    def endpoint(self) -> str:
        return f"{self.api_server.rstrip('/')}/bot{self._api_key}/sendMessage"

    async def send(self, text: str) -> None:
        payload = {
            "chat_id": self.target,
            "text": text,
            "parse_mode": self.PARSE_MODE,
            "disable_web_page_preview": True,
        }
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(_TransientSinkError),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._post(payload)
        except _TransientSinkError as e:
            raise SinkError(
                f"Delivery failed after {self.max_attempts} attempt(s): {e}",
                data=e.data,
            ) from e

    async def _post(self, payload: dict[str, Any]) -> None:
        try:
            async with self._session.post(
                self.endpoint, json=payload, timeout=self.timeout
            ) as resp:
                body = await self._read_body(resp)
                logging.debug(
                    f"Bot API response: status={resp.status}, ok={body.get('ok')}"
                )
                if resp.status == 429 or resp.status >= 500:
                    raise _TransientSinkError(
                        f"Bot API error {resp.status}",
                        data={"status": resp.status, "description": body.get("description")},
                    )
                if resp.status >= 400 or body.get("ok") is False:
                    raise SinkError(
                        f"Bot API error {resp.status}: {body.get('description', 'unknown')}",
                        data={"status": resp.status},
                    )
        except (aiohttp.ClientError, TimeoutError) as e:
            raise _TransientSinkError(f"{type(e).__name__}: {e}") from e

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse) -> dict[str, Any]:
        try:
            data = await resp.json(content_type=None)
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
