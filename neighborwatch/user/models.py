"""User domain models.

SQLModel table definition for User.
"""

import uuid
from enum import Enum

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from neighborwatch.core.mixins import TimestampMixin


class UserStatus(str, Enum):
    """User account status.

    - active: account usable
    - inactive: deactivated by an operator
    """

    active = "active"
    inactive = "inactive"


class User(TimestampMixin, SQLModel, table=True):
    """User database model.

    Note: external_id (Firebase UID) and push_token are internal-only and
    must never be exposed in API responses.

    The optional default area (default_area_*) is a personal circle used by the
    client to center the feed; it grants no visibility on its own.
    """

    __tablename__: str = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    external_id: str = Field(index=True, unique=True)
    email: EmailStr = Field(index=True, unique=True, max_length=255)
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)
    status: UserStatus = Field(default=UserStatus.active, max_length=20)

    # Profile visibility
    show_name: bool = Field(default=True)
    show_email: bool = Field(default=False)
    show_public_events: bool = Field(default=True)

    # Optional default area of interest
    default_area_latitude: float | None = Field(default=None)
    default_area_longitude: float | None = Field(default=None)
    default_area_radius: float | None = Field(default=None)

    push_token: str | None = Field(default=None, max_length=255)

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.email.split("@", 1)[0]
