"""Typed values decoded from the query protocol."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _QueryModel(BaseModel):
    # Unknown keys are common (servers add fields between versions)
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class QueryStatus(_QueryModel):
    """Trailing ``error id=<int> msg=<text>`` line of every response."""

    code: int = Field(alias="id")
    message: str = Field(alias="msg")

    @property
    def ok(self) -> bool:
        return self.code == 0


class ClientRecord(_QueryModel):
    """One entry of a ``clientlist`` response."""

    client_id: int = Field(alias="clid")
    channel_id: int = Field(alias="cid")
    client_database_id: int = Field(alias="client_database_id")
    client_type: int = Field(alias="client_type")
    nickname: str = Field(alias="client_nickname")

    @property
    def is_query_client(self) -> bool:
        """``client_type == 1`` marks a ServerQuery/system account."""
        return self.client_type == 1


class EnterEvent(_QueryModel):
    """``notifycliententerview`` push line."""

    client_id: int = Field(alias="clid")
    nickname: str = Field(alias="client_nickname")
    unique_identifier: str = Field(alias="client_unique_identifier")
    country: str = Field(default="", alias="client_country")


class LeftEvent(_QueryModel):
    """``notifyclientleftview`` push line."""

    client_id: int = Field(alias="clid")
    reason: str = Field(default="", alias="reasonmsg")
