"""Shared schema building blocks.

The mobile client speaks camelCase JSON; Python code stays snake_case.
"""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import ConfigDict, Field, PlainSerializer, StringConstraints
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel


def to_utc_iso(value: datetime) -> str:
    """Format datetime as ISO 8601 string in UTC.

    Converts datetime to UTC timezone and formats with Z suffix
    (e.g. 2026-01-19T12:34:56Z).
    """
    if value.tzinfo is not None:
        utc_value = value.astimezone(UTC)
    else:
        # Naive datetime - assume it's already UTC (from TimestampMixin)
        utc_value = value.replace(tzinfo=UTC)
    return utc_value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


Latitude = Annotated[float, Field(ge=-90.0, le=90.0)]
Longitude = Annotated[float, Field(ge=-180.0, le=180.0)]
UTCDateTime = Annotated[datetime, PlainSerializer(to_utc_iso, return_type=str)]
NonEmptyText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)
]


class CamelModel(SQLModel):
    """Base for request/response schemas exchanged with the client."""

    model_config = ConfigDict(  # type: ignore[assignment]
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Plain acknowledgement body."""

    message: str
