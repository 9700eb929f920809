from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_QUERY_HOST,
    DEFAULT_QUERY_PORT,
    DEFAULT_SERVER_ID,
    DEFAULT_TELEGRAM_API_SERVER,
)


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RawQueryConfig(_Section):
    """ServerQuery connection and credentials.

    Attributes:
        server: Query host.
        port: Query TCP port.
        user: Query login name.
        password: Query login password.
    """

    server: str = DEFAULT_QUERY_HOST
    port: int = Field(default=DEFAULT_QUERY_PORT, ge=1, le=65535)
    user: str
    password: str

    @field_validator("server", mode="before")
    @classmethod
    def default_blank_server(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_QUERY_HOST
        return v.strip() if isinstance(v, str) else v


class ServerConfig(_Section):
    """Virtual server selection and notification filtering.

    Attributes:
        server_id: Virtual server selected with ``use``.
        ignore_user: Nicknames or unique identifiers never reported.
    """

    server_id: int = DEFAULT_SERVER_ID
    ignore_user: list[str] = Field(default_factory=list)

    @field_validator("ignore_user", mode="before")
    @classmethod
    def validate_ignore_user(cls, v: Any) -> list[str]:
        """Drop blanks and duplicates while keeping the configured order."""
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("ignore_user must be a list")
        return list(dict.fromkeys(str(item) for item in v if str(item).strip()))


class MiscConfig(_Section):
    interval: int = Field(default=DEFAULT_POLL_INTERVAL_MS, ge=0)  # milliseconds


class TelegramConfig(_Section):
    """Bot API destination.

    An empty ``api_key`` disables delivery; events are still consumed.
    """

    api_key: str
    api_server: str = DEFAULT_TELEGRAM_API_SERVER
    target: int

    @property
    def enabled(self) -> bool:
        return bool(self.api_key.strip())


class ObserverConfig(_Section):
    raw_query: RawQueryConfig
    telegram: TelegramConfig
    server: ServerConfig = Field(default_factory=ServerConfig)
    misc: MiscConfig = Field(default_factory=MiscConfig)
