"""Tests for neighborwatch/chat/service.py - found-object chats."""

import pytest
from sqlmodel import Session, select

from neighborwatch.chat import service
from neighborwatch.chat.exceptions import (
    ActiveChatExistsError,
    ChatFinderRequiredError,
    ChatNotActiveError,
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
from neighborwatch.device.models import Device, DeviceType
from neighborwatch.user.models import User


@pytest.fixture(name="device")
def device_fixture(session: Session, test_user: User):
    device = Device(
        user_id=test_user.id, name="Blue backpack", type=DeviceType.TAGGED_OBJECT
    )
    session.add(device)
    session.commit()
    session.refresh(device)
    return device


def _message_count(session: Session) -> int:
    return len(session.exec(select(FoundObjectMessage)).all())


def test_start_chat_issues_session(session: Session, device: Device, test_user: User):
    chat, created = service.start_chat(
        session, device.qr_code, "Found it at the park", finder_name="Ana"
    )

    assert created is True
    assert chat.owner_id == test_user.id
    assert chat.status == ChatStatus.ACTIVE
    assert len(chat.finder_session_id) >= 32
    [message] = service.list_messages(session, chat.id)
    assert message.sender == MessageSender.FINDER
    assert message.content == "Found it at the park"


def test_start_chat_is_idempotent_per_session(session: Session, device: Device):
    chat, _ = service.start_chat(session, device.qr_code, "Hello")

    again, created = service.start_chat(
        session, device.qr_code, "Hello again", session_id=chat.finder_session_id
    )

    assert created is False
    assert again.id == chat.id
    assert len(session.exec(select(FoundObjectChat)).all()) == 1
    assert _message_count(session) == 1


def test_unknown_session_id_gets_fresh_token(session: Session, device: Device):
    chat, created = service.start_chat(
        session, device.qr_code, "Hello", session_id="made-up-token"
    )

    assert created is True
    assert chat.finder_session_id != "made-up-token"


def test_known_session_after_resolution_opens_new_chat(
    session: Session, device: Device, test_user: User
):
    chat, _ = service.start_chat(session, device.qr_code, "Hello")
    service.set_status(session, test_user, chat.id, ChatStatus.RESOLVED)

    second, created = service.start_chat(
        session, device.qr_code, "Me again", session_id=chat.finder_session_id
    )

    assert created is True
    assert second.id != chat.id
    assert second.finder_session_id == chat.finder_session_id


def test_unknown_qr(session: Session):
    with pytest.raises(QrCodeNotFoundError):
        service.start_chat(session, "no-such-code", "Hello")


def test_disabled_qr(session: Session, device: Device):
    device.qr_enabled = False
    session.add(device)
    session.commit()

    with pytest.raises(QrDisabledError) as exc_info:
        service.start_chat(session, device.qr_code, "Hello")

    assert exc_info.value.status_code == 403
    assert session.exec(select(FoundObjectChat)).all() == []


def test_device_without_owner(session: Session):
    device = Device(name="Orphan tag", type=DeviceType.TAGGED_OBJECT)
    session.add(device)
    session.commit()

    with pytest.raises(DeviceWithoutOwnerError):
        service.start_chat(session, device.qr_code, "Hello")


def test_finder_session_must_match(session: Session, device: Device):
    chat, _ = service.start_chat(session, device.qr_code, "Hello")

    with pytest.raises(InvalidChatSessionError) as exc_info:
        service.post_finder_message(session, chat.id, "wrong-token", "Hi")

    assert exc_info.value.status_code == 403
    assert _message_count(session) == 1


def test_conversation_in_order(session: Session, device: Device, test_user: User):
    chat, _ = service.start_chat(session, device.qr_code, "Hello")

    service.post_owner_message(session, test_user, chat.id, "Thanks! Where are you?")
    service.post_finder_message(session, chat.id, chat.finder_session_id, "At the cafe")

    messages = service.list_messages(session, chat.id)
    assert [m.sender for m in messages] == [
        MessageSender.FINDER,
        MessageSender.OWNER,
        MessageSender.FINDER,
    ]


def test_only_owner_posts_as_owner(
    session: Session, device: Device, other_user: User
):
    chat, _ = service.start_chat(session, device.qr_code, "Hello")

    with pytest.raises(ChatOwnerRequiredError):
        service.post_owner_message(session, other_user, chat.id, "Mine!")


def test_resolved_chat_rejects_messages(
    session: Session, device: Device, test_user: User
):
    chat, _ = service.start_chat(session, device.qr_code, "Hello")
    service.set_status(session, test_user, chat.id, ChatStatus.RESOLVED)

    with pytest.raises(ChatNotActiveError) as exc_info:
        service.post_finder_message(session, chat.id, chat.finder_session_id, "Hi?")

    assert exc_info.value.status_code == 409
    assert _message_count(session) == 1


def test_status_changes_once(session: Session, device: Device, test_user: User):
    chat, _ = service.start_chat(session, device.qr_code, "Hello")

    closed = service.set_status(session, test_user, chat.id, ChatStatus.CLOSED)
    assert closed.status == ChatStatus.CLOSED

    with pytest.raises(ChatNotActiveError):
        service.set_status(session, test_user, chat.id, ChatStatus.RESOLVED)


def test_status_cannot_go_back_to_active(
    session: Session, device: Device, test_user: User
):
    chat, _ = service.start_chat(session, device.qr_code, "Hello")

    with pytest.raises(ChatNotActiveError):
        service.set_status(session, test_user, chat.id, ChatStatus.ACTIVE)


def test_owner_inbox(session: Session, device: Device, test_user: User):
    first, _ = service.start_chat(session, device.qr_code, "Hello")
    second, _ = service.start_chat(session, device.qr_code, "Found your bag too")
    service.post_owner_message(session, test_user, first.id, "Thanks")
    service.set_status(session, test_user, second.id, ChatStatus.CLOSED)

    active = service.list_owner_chats(session, test_user, ChatStatus.ACTIVE)

    assert [s.chat.id for s in active] == [first.id]
    assert active[0].message_count == 2
    assert active[0].last_message.content == "Thanks"
    assert active[0].device_name == "Blue backpack"
    assert len(service.list_owner_chats(session, test_user)) == 2


def test_concurrent_start_returns_the_winning_chat(
    session: Session, device: Device, test_user: User, monkeypatch
):
    first, _ = service.start_chat(session, device.qr_code, "Hello")
    service.set_status(session, test_user, first.id, ChatStatus.RESOLVED)
    token = first.finder_session_id

    lookup = service._find_active_chat
    winner_ids = []

    def racing_lookup(db, device_id, session_id):
        # A parallel request commits its chat between the lookup and the insert
        if not winner_ids:
            winner = FoundObjectChat(
                device_id=device_id,
                owner_id=test_user.id,
                finder_session_id=session_id,
            )
            db.add(winner)
            db.commit()
            winner_ids.append(winner.id)
            return None
        return lookup(db, device_id, session_id)

    monkeypatch.setattr(service, "_find_active_chat", racing_lookup)

    chat, created = service.start_chat(session, device.qr_code, "Me again", session_id=token)

    assert created is False
    assert chat.id == winner_ids[0]
    active = session.exec(
        select(FoundObjectChat).where(FoundObjectChat.status == ChatStatus.ACTIVE)
    ).all()
    assert [c.id for c in active] == winner_ids
    assert _message_count(session) == 1


# --- signed-in finder ------------------------------------------------------------


def test_registered_chat_links_finder(
    session: Session, device: Device, test_user: User, other_user: User
):
    chat = service.start_registered_chat(session, other_user, device.qr_code)

    assert chat.finder_id == other_user.id
    assert chat.owner_id == test_user.id
    assert chat.finder_name == "Other Person"
    [message] = service.list_messages(session, chat.id)
    assert message.content == "Hi! I found your Blue backpack."


def test_registered_chat_own_device(session: Session, device: Device, test_user: User):
    with pytest.raises(OwnDeviceContactError) as exc_info:
        service.start_registered_chat(session, test_user, device.qr_code)

    assert exc_info.value.status_code == 400


def test_registered_chat_reopens_after_resolution(
    session: Session, device: Device, test_user: User, other_user: User
):
    chat = service.start_registered_chat(session, other_user, device.qr_code, "Hi")
    with pytest.raises(ActiveChatExistsError):
        service.start_registered_chat(session, other_user, device.qr_code, "Hi again")

    service.set_status(session, test_user, chat.id, ChatStatus.RESOLVED)
    again = service.start_registered_chat(session, other_user, device.qr_code, "Hi again")

    assert again.id != chat.id
    finds = service.list_finder_chats(session, other_user)
    assert {s.chat.id for s in finds} == {chat.id, again.id}


def test_registered_finder_only_posts_in_own_chats(
    session: Session, device: Device, other_user: User, inactive_user: User
):
    chat = service.start_registered_chat(session, other_user, device.qr_code)

    with pytest.raises(ChatFinderRequiredError):
        service.post_registered_finder_message(session, inactive_user, chat.id, "Me too")

    message = service.post_registered_finder_message(session, other_user, chat.id, "Still here")
    assert message.sender == MessageSender.FINDER
