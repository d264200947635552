"""Found-object chat schemas.

The finder's session token is returned exactly once, when the chat starts.
"""

import uuid

from pydantic import Field

from neighborwatch.chat.models import ChatStatus, MessageSender
from neighborwatch.core.schemas import CamelModel, NonEmptyText, UTCDateTime
from neighborwatch.device.models import DeviceType


class PublicDeviceInfo(CamelModel):
    device_name: str
    device_type: DeviceType
    owner_name: str | None


class ChatStart(CamelModel):
    message: NonEmptyText
    finder_name: str | None = Field(default=None, max_length=80)
    session_id: str | None = Field(default=None, max_length=64)


class ChatStarted(CamelModel):
    chat_id: uuid.UUID
    session_id: str


class RegisteredChatStart(CamelModel):
    message: NonEmptyText | None = None


class RegisteredChatStarted(CamelModel):
    chat_id: uuid.UUID
    device_name: str


class MessageCreate(CamelModel):
    content: NonEmptyText


class MessageRead(CamelModel):
    id: int
    sender: MessageSender
    content: str
    created_at: UTCDateTime


class ChatRead(CamelModel):
    id: uuid.UUID
    device_id: uuid.UUID
    device_name: str
    finder_name: str | None
    status: ChatStatus
    created_at: UTCDateTime
    updated_at: UTCDateTime
    messages: list[MessageRead]


class ChatListItem(CamelModel):
    id: uuid.UUID
    device_id: uuid.UUID
    device_name: str
    finder_name: str | None
    status: ChatStatus
    message_count: int
    last_message: MessageRead | None
    updated_at: UTCDateTime


class ChatStatusUpdate(CamelModel):
    status: ChatStatus
