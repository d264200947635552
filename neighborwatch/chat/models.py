"""Found-object chat models.

A chat opens when someone scans a device's QR code and writes to its owner.
Anonymous finders have no account: a random session token, handed out when
the chat starts, is the only proof of who they are. Signed-in finders are
also linked by ``finder_id``.
"""

import uuid
from enum import Enum

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from neighborwatch.core.mixins import CreatedAtMixin, TimestampMixin


class ChatStatus(str, Enum):
    """ACTIVE is the only state that accepts messages; the others are final."""

    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class MessageSender(str, Enum):
    FINDER = "FINDER"
    OWNER = "OWNER"


class FoundObjectChat(TimestampMixin, SQLModel, table=True):
    __tablename__: str = "found_object_chats"
    __table_args__ = (
        Index(
            "uq_found_object_chats_active_session",
            "device_id",
            "finder_session_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    device_id: uuid.UUID = Field(foreign_key="devices.id", index=True, ondelete="CASCADE")
    owner_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    finder_id: uuid.UUID | None = Field(
        default=None, foreign_key="users.id", index=True, ondelete="SET NULL"
    )
    finder_session_id: str = Field(max_length=64, index=True)
    finder_name: str | None = Field(default=None, max_length=80)
    status: ChatStatus = Field(default=ChatStatus.ACTIVE, index=True)


class FoundObjectMessage(CreatedAtMixin, SQLModel, table=True):
    """Messages are read back in id order, which is insertion order."""

    __tablename__: str = "found_object_messages"

    id: int | None = Field(default=None, primary_key=True)
    chat_id: uuid.UUID = Field(
        foreign_key="found_object_chats.id", index=True, ondelete="CASCADE"
    )
    sender: MessageSender
    content: str = Field(max_length=2000)
