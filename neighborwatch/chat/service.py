"""Found-object chat service.

State machine: a chat starts ACTIVE and moves once, by the owner's hand, to
RESOLVED or CLOSED. Both of those are final.

Starting a chat is idempotent per finder session: a finder who presents the
session token they already hold gets their ACTIVE chat back instead of a new
one. A partial unique index on (device_id, finder_session_id) for ACTIVE rows
collapses concurrent duplicates; the loser re-reads the winner's chat.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from neighborwatch.chat.exceptions import (
    ActiveChatExistsError,
    ChatFinderRequiredError,
    ChatNotActiveError,
    ChatNotFoundError,
    ChatOwnerRequiredError,
    DeviceWithoutOwnerError,
    InvalidChatSessionError,
    OwnDeviceContactError,
    QrCodeNotFoundError,
    QrDisabledError,
)
from neighborwatch.chat.models import (
    ChatStatus,
    FoundObjectChat,
    FoundObjectMessage,
    MessageSender,
)
from neighborwatch.core.mixins import utc_now
from neighborwatch.device.models import Device
from neighborwatch.user.models import User

logger = logging.getLogger(__name__)

FINAL_STATUSES = (ChatStatus.RESOLVED, ChatStatus.CLOSED)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


def get_device_by_qr(session: Session, qr_code: str) -> Device:
    """Device behind a QR code, if its owner allows contact."""
    device = session.exec(select(Device).where(Device.qr_code == qr_code)).first()
    if not device:
        raise QrCodeNotFoundError()
    if not device.qr_enabled:
        raise QrDisabledError()
    return device


def _find_active_chat(
    session: Session, device_id: uuid.UUID, session_id: str
) -> FoundObjectChat | None:
    return session.exec(
        select(FoundObjectChat).where(
            FoundObjectChat.device_id == device_id,
            FoundObjectChat.finder_session_id == session_id,
            FoundObjectChat.status == ChatStatus.ACTIVE,
        )
    ).first()


def _known_session(session: Session, device_id: uuid.UUID, session_id: str) -> bool:
    return (
        session.exec(
            select(FoundObjectChat.id).where(
                FoundObjectChat.device_id == device_id,
                FoundObjectChat.finder_session_id == session_id,
            )
        ).first()
        is not None
    )


def start_chat(
    session: Session,
    qr_code: str,
    message: str,
    finder_name: str | None = None,
    session_id: str | None = None,
) -> tuple[FoundObjectChat, bool]:
    """Open a chat with the owner of the device behind ``qr_code``.

    ``session_id`` is the token the finder already holds, if any. Tokens are
    only reused when this server issued them for the same device; anything
    else gets a fresh one.

    Returns the chat and whether it was created by this call.
    """
    device = get_device_by_qr(session, qr_code)
    if device.user_id is None:
        raise DeviceWithoutOwnerError()

    if session_id and _known_session(session, device.id, session_id):
        existing = _find_active_chat(session, device.id, session_id)
        if existing:
            return existing, False
    else:
        session_id = new_session_id()

    chat = FoundObjectChat(
        device_id=device.id,
        owner_id=device.user_id,
        finder_session_id=session_id,
        finder_name=finder_name,
    )
    try:
        session.add(chat)
        session.flush()
        session.add(
            FoundObjectMessage(
                chat_id=chat.id, sender=MessageSender.FINDER, content=message
            )
        )
        session.commit()
    except IntegrityError:
        session.rollback()
        existing = _find_active_chat(session, device.id, session_id)
        if existing is None:
            raise
        return existing, False

    session.refresh(chat)
    logger.info("Found-object chat started", extra={"chat_id": str(chat.id)})
    return chat, True


def start_registered_chat(
    session: Session, user: User, qr_code: str, message: str | None = None
) -> FoundObjectChat:
    """Open a chat as a signed-in finder.

    One ACTIVE chat per finder and device; the finder's display name is
    shown to the owner.
    """
    device = get_device_by_qr(session, qr_code)
    if device.user_id is None:
        raise DeviceWithoutOwnerError()
    if device.user_id == user.id:
        raise OwnDeviceContactError()

    existing = session.exec(
        select(FoundObjectChat.id).where(
            FoundObjectChat.device_id == device.id,
            FoundObjectChat.finder_id == user.id,
            FoundObjectChat.status == ChatStatus.ACTIVE,
        )
    ).first()
    if existing:
        raise ActiveChatExistsError()

    chat = FoundObjectChat(
        device_id=device.id,
        owner_id=device.user_id,
        finder_id=user.id,
        finder_session_id=new_session_id(),
        finder_name=user.display_name,
    )
    session.add(chat)
    session.flush()
    session.add(
        FoundObjectMessage(
            chat_id=chat.id,
            sender=MessageSender.FINDER,
            content=message or f"Hi! I found your {device.name}.",
        )
    )
    session.commit()
    session.refresh(chat)
    logger.info("Found-object chat started", extra={"chat_id": str(chat.id)})
    return chat


def get_chat_or_404(session: Session, chat_id: uuid.UUID) -> FoundObjectChat:
    chat = session.get(FoundObjectChat, chat_id)
    if not chat:
        raise ChatNotFoundError()
    return chat


def get_finder_chat(
    session: Session, chat_id: uuid.UUID, session_id: str
) -> FoundObjectChat:
    """The chat, if ``session_id`` is its finder's token."""
    chat = get_chat_or_404(session, chat_id)
    if not secrets.compare_digest(chat.finder_session_id.encode(), session_id.encode()):
        raise InvalidChatSessionError()
    return chat


def get_owner_chat(session: Session, user: User, chat_id: uuid.UUID) -> FoundObjectChat:
    chat = get_chat_or_404(session, chat_id)
    if chat.owner_id != user.id:
        raise ChatOwnerRequiredError()
    return chat


def get_registered_finder_chat(
    session: Session, user: User, chat_id: uuid.UUID
) -> FoundObjectChat:
    chat = get_chat_or_404(session, chat_id)
    if chat.finder_id != user.id:
        raise ChatFinderRequiredError()
    return chat


def list_messages(session: Session, chat_id: uuid.UUID) -> list[FoundObjectMessage]:
    return list(
        session.exec(
            select(FoundObjectMessage)
            .where(FoundObjectMessage.chat_id == chat_id)
            .order_by(col(FoundObjectMessage.id))
        ).all()
    )


def _post(
    session: Session, chat: FoundObjectChat, sender: MessageSender, content: str
) -> FoundObjectMessage:
    if chat.status != ChatStatus.ACTIVE:
        raise ChatNotActiveError()
    message = FoundObjectMessage(chat_id=chat.id, sender=sender, content=content)
    chat.updated_at = utc_now()
    session.add(message)
    session.add(chat)
    session.commit()
    session.refresh(message)
    return message


def post_finder_message(
    session: Session, chat_id: uuid.UUID, session_id: str, content: str
) -> FoundObjectMessage:
    chat = get_finder_chat(session, chat_id, session_id)
    return _post(session, chat, MessageSender.FINDER, content)


def post_registered_finder_message(
    session: Session, user: User, chat_id: uuid.UUID, content: str
) -> FoundObjectMessage:
    chat = get_registered_finder_chat(session, user, chat_id)
    return _post(session, chat, MessageSender.FINDER, content)


def post_owner_message(
    session: Session, user: User, chat_id: uuid.UUID, content: str
) -> FoundObjectMessage:
    chat = get_owner_chat(session, user, chat_id)
    return _post(session, chat, MessageSender.OWNER, content)


def set_status(
    session: Session, user: User, chat_id: uuid.UUID, new_status: ChatStatus
) -> FoundObjectChat:
    """Resolve or close an ACTIVE chat. Owner only."""
    chat = get_owner_chat(session, user, chat_id)
    if new_status not in FINAL_STATUSES:
        raise ChatNotActiveError("A chat can only be resolved or closed")

    result = session.exec(
        update(FoundObjectChat)
        .where(
            col(FoundObjectChat.id) == chat.id,
            col(FoundObjectChat.status) == ChatStatus.ACTIVE,
        )
        .values(status=new_status, updated_at=utc_now())
    )
    if result.rowcount != 1:
        session.rollback()
        raise ChatNotActiveError()
    session.commit()
    session.refresh(chat)
    logger.info(
        "Found-object chat %s", new_status.value.lower(), extra={"chat_id": str(chat.id)}
    )
    return chat


@dataclass
class ChatSummary:
    chat: FoundObjectChat
    device_name: str
    message_count: int
    last_message: FoundObjectMessage | None


def _summaries(session: Session, statement) -> list[ChatSummary]:
    rows = session.exec(
        statement.order_by(col(FoundObjectChat.updated_at).desc(), col(FoundObjectChat.id))
    ).all()

    summaries = []
    for chat, device in rows:
        count = session.exec(
            select(func.count())
            .select_from(FoundObjectMessage)
            .where(FoundObjectMessage.chat_id == chat.id)
        ).one()
        last = session.exec(
            select(FoundObjectMessage)
            .where(FoundObjectMessage.chat_id == chat.id)
            .order_by(col(FoundObjectMessage.id).desc())
            .limit(1)
        ).first()
        summaries.append(ChatSummary(chat, device.name, count, last))
    return summaries


def list_owner_chats(
    session: Session, user: User, status: ChatStatus | None = None
) -> list[ChatSummary]:
    """The owner's inbox, most recently active first."""
    statement = select(FoundObjectChat, Device).join(
        Device, col(Device.id) == FoundObjectChat.device_id
    )
    statement = statement.where(FoundObjectChat.owner_id == user.id)
    if status is not None:
        statement = statement.where(FoundObjectChat.status == status)
    return _summaries(session, statement)


def list_finder_chats(session: Session, user: User) -> list[ChatSummary]:
    """Chats the user opened as a signed-in finder."""
    statement = (
        select(FoundObjectChat, Device)
        .join(Device, col(Device.id) == FoundObjectChat.device_id)
        .where(FoundObjectChat.finder_id == user.id)
    )
    return _summaries(session, statement)
