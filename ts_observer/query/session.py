"""ServerQuery session over a single asyncio stream."""

from __future__ import annotations

import asyncio
import logging

from ..constants import (
    QUERY_CONNECT_TIMEOUT_SECONDS,
    QUERY_KEEPALIVE_COMMAND,
    QUERY_READ_BUFFER_SIZE,
    QUERY_READ_TIMEOUT_SECONDS,
)
from ..errors.internal import (
    ConnectError,
    DecodeError,
    QueryError,
    StreamIOError,
)
from ..logs.logger import logger
from .codec import decode_records, decode_status, encode_command, is_frame_complete
from .models import ClientRecord


class QuerySession:
    """One open query stream.

    Every public operation holds ``_lock`` for its whole duration, so a
    command's write and the read of its reply are never interleaved with
    another command on the same stream (the protocol has no correlation id).
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        read_timeout: float = QUERY_READ_TIMEOUT_SECONDS,
        buffer_size: int = QUERY_READ_BUFFER_SIZE,
        peer: str = "",
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.read_timeout = read_timeout
        self.buffer_size = buffer_size
        self.peer = peer
        self._pending = bytearray()
        self._lock = asyncio.Lock()
        self.closed = False

    @classmethod
    async def connect(
        cls,
        host: str,
        port: int,
        *,
        connect_timeout: float = QUERY_CONNECT_TIMEOUT_SECONDS,
        **kwargs,
    ) -> QuerySession:
        peer = f"{host}:{port}"
        logger.log_event("query", "connect_start", peer=peer)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=connect_timeout
            )
        except TimeoutError as e:
            raise ConnectError(
                f"Timed out connecting to {peer}", data={"timeout": connect_timeout}
            ) from e
        except OSError as e:
            raise ConnectError(f"Got error while connect to {peer}: {e}") from e

        session = cls(reader, writer, peer=peer, **kwargs)
        banner = await session.read_frame()
        if banner is None:
            logger.log_event("query", "banner_missing", level=logging.WARNING, peer=peer)
        else:
            logger.log_event(
                "query", "banner", level=logging.DEBUG, peer=peer, banner=banner.strip()
            )
        logger.log_event("query", "connect_success", peer=peer)
        return session

    # ------------------------------------------------------------------ #
    # Framing
    # ------------------------------------------------------------------ #
    async def read_frame(self) -> str | None:
        async with self._lock:
            return await self._read_frame()

    async def write_frame(self, payload: bytes) -> None:
        async with self._lock:
            await self._write_frame(payload)

    async def _read_frame(self) -> str | None:
        """Accumulate chunks until a frame is complete.

        A poll window with no bytes returns ``None``. Bytes of an unfinished
        frame stay in ``_pending`` and are continued on the next call.
        """
        while True:
            try:
                chunk = await asyncio.wait_for(
                    self.reader.read(self.buffer_size), timeout=self.read_timeout
                )
            except TimeoutError:
                if self._pending:
                    logger.log_event(
                        "query",
                        "partial_frame",
                        level=logging.DEBUG,
                        peer=self.peer,
                        pending=len(self._pending),
                    )
                return None
            except OSError as e:
                raise StreamIOError(f"Got error while read data: {e}") from e

            if not chunk:
                raise StreamIOError(
                    "Connection closed by server", data={"peer": self.peer}
                )
            self._pending.extend(chunk)
            if len(chunk) < self.buffer_size or is_frame_complete(bytes(self._pending)):
                break

        frame = self._pending.decode("utf-8", errors="replace")
        self._pending.clear()
        logger.log_event("query", "raw", level=logging.DEBUG, peer=self.peer, raw=frame)
        return frame

    async def _write_frame(self, payload: bytes) -> None:
        if self.closed:
            raise StreamIOError("Session is closed", data={"peer": self.peer})
        try:
            self.writer.write(payload)
            await self.writer.drain()
        except OSError as e:
            raise StreamIOError(f"Got error while send data: {e}") from e
        logger.log_event(
            "query",
            "sent",
            level=logging.DEBUG,
            peer=self.peer,
            command=_command_name(payload),
            size=len(payload),
        )

    async def request(self, payload: bytes) -> str:
        """Single round trip: write ``payload`` then read its reply frame."""
        async with self._lock:
            await self._write_frame(payload)
            frame = await self._read_frame()
        if frame is None:
            raise StreamIOError(
                "Return data is None", data={"command": _command_name(payload)}
            )
        return frame

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #
    async def _basic_operation(self, payload: bytes) -> None:
        try:
            response = await self.request(payload)
            decode_status(response)
        except (StreamIOError, DecodeError) as e:
            raise QueryError.from_exception(e) from e

    async def login(self, user: str, password: str) -> None:
        await self._basic_operation(encode_command("login", user, password))
        logger.log_event("query", "login_success", user=user)

    async def select_server(self, server_id: int) -> None:
        await self._basic_operation(encode_command("use", server_id))
        logger.log_event("query", "server_selected", server_id=server_id)

    async def register_events(self) -> None:
        await self._basic_operation(
            encode_command("servernotifyregister", options={"event": "server"})
        )
        logger.log_event("query", "events_registered", level=logging.DEBUG)

    async def list_clients(self) -> list[ClientRecord]:
        payload = encode_command("clientlist")
        try:
            response = await self.request(payload)
            records = decode_records(response, ClientRecord)
        except (StreamIOError, DecodeError) as e:
            raise QueryError.from_exception(e) from e
        if records is None:
            # The server always sends a result line here, even a blank one
            raise QueryError.empty_response()
        return records

    async def keepalive(self) -> None:
        """Write the keepalive command without awaiting its reply.

        The reply is consumed by the next ``read_frame`` like any other
        non-event frame.
        """
        await self.write_frame(encode_command(QUERY_KEEPALIVE_COMMAND))
        logger.log_event("query", "keepalive_sent", level=logging.DEBUG)

    async def logout(self) -> None:
        """Send ``quit``; servers may close without a status line."""
        await self.write_frame(encode_command("quit"))
        logger.log_event("query", "logout_sent", level=logging.DEBUG)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except OSError as e:
            logger.log_event(
                "query", "close_error", level=logging.DEBUG, peer=self.peer, error=str(e)
            )
        logger.log_event("query", "disconnected", level=logging.DEBUG, peer=self.peer)


def _command_name(payload: bytes) -> str:
    return payload.decode("utf-8", errors="replace").split(" ", 1)[0].strip()
