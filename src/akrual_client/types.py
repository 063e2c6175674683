"""Data types for the Akrual API client.

Pydantic models describe the immutable credentials and the request
parameters each endpoint expects; ``model_dump(by_alias=True)`` yields the
exact field names and formats the remote API reads. Session state is a
frozen dataclass because it carries an ``httpx.Cookies`` jar.
"""

import datetime
import enum
from dataclasses import dataclass
from typing import Any, TypeAlias

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

ParsedResponse: TypeAlias = dict[str, Any] | list[Any]

# PHP DateTimeInterface::ISO8601, e.g. 2024-01-31T00:00:00+0000
ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class LoginEncoding(str, enum.Enum):
    """Body encoding used for the password-grant login request."""

    JSON = "json"
    FORM = "form"


class Credentials(BaseModel):
    """Endpoint and login credentials, fixed for the client's lifetime."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    username: str
    password: str = Field(repr=False)

    @field_validator("endpoint")
    @classmethod
    def strip_endpoint(cls, value: str) -> str:
        if not value:
            msg = "endpoint cannot be empty"
            raise ValueError(msg)
        return value.rstrip("/")

    @property
    def host(self) -> str:
        """Host name of the configured endpoint."""
        return httpx.URL(self.endpoint).host

    def login_payload(self) -> dict[str, str]:
        """Fields sent to the password-grant token endpoint."""
        return {
            "username": self.username,
            "password": self.password,
            "grant_type": "password",
        }


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the authentication state held by a session.

    Replaced as a whole on every login so the token and cookies read by a
    request always belong to the same login.
    """

    token: str | None = None
    cookies: httpx.Cookies | None = None


def format_iso8601(value: datetime.date) -> str:
    """Format a date or datetime the way the remote API expects.

    Naive datetimes are taken as UTC; plain dates as midnight UTC.
    """
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time())
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.strftime(ISO8601_FORMAT)


class SerieQuery(BaseModel):
    """Parameters selecting a single series."""

    model_config = ConfigDict(populate_by_name=True)

    serie_id: int = Field(alias="serieId")


class SeriePeriodQuery(SerieQuery):
    """Parameters selecting a series over a date range."""

    start: datetime.datetime | datetime.date = Field(alias="dateInitial")
    end: datetime.datetime | datetime.date = Field(alias="dateFinal")

    @field_serializer("start", "end")
    def serialize_instant(self, value: datetime.date) -> str:
        return format_iso8601(value)


class DesagioQuery(SerieQuery):
    """Parameters for the discount (desagio) calculation."""

    type_: int = Field(alias="tipo")
    date: datetime.datetime | datetime.date = Field(alias="data")
    value: float = Field(alias="valor")

    @field_serializer("date")
    def serialize_date(self, value: datetime.date) -> str:
        return value.strftime("%Y-%m-%d")

    @field_serializer("value")
    def serialize_value(self, value: float) -> int | float:
        # Whole numbers go out as 1000, not 1000.0
        return int(value) if value.is_integer() else value
