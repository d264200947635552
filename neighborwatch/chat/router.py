"""Found-object chat routers.

``public_router`` serves anonymous finders: no authentication, the chat
session token in the path is their only credential. ``finder_router`` serves
signed-in finders and ``router`` the owner's inbox.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from fastapi.responses import HTMLResponse
from sqlmodel import Session

from neighborwatch.auth.dependencies import CurrentUserDep, require_auth
from neighborwatch.chat import service
from neighborwatch.chat.models import ChatStatus, FoundObjectChat
from neighborwatch.chat.schemas import (
    ChatListItem,
    ChatRead,
    ChatStart,
    ChatStarted,
    ChatStatusUpdate,
    MessageCreate,
    MessageRead,
    PublicDeviceInfo,
    RegisteredChatStart,
    RegisteredChatStarted,
)
from neighborwatch.core.constants import CommonResponses, JinjaPagesEnv, Routes
from neighborwatch.core.deps import PushServiceDep, SessionDep, SettingsDep
from neighborwatch.device.models import Device
from neighborwatch.notifications.push import PushService
from neighborwatch.user.models import User

public_router = APIRouter(
    prefix=Routes.PUBLIC.prefix,
    tags=[Routes.PUBLIC.tag],
    responses={**CommonResponses.NOT_FOUND},
)

router = APIRouter(
    prefix=Routes.FOUND_CHAT.prefix,
    tags=[Routes.FOUND_CHAT.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)

finder_router = APIRouter(
    prefix=Routes.FINDER.prefix,
    tags=[Routes.FINDER.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
        **CommonResponses.NOT_FOUND,
    },
)


def _chat_read(session: Session, chat: FoundObjectChat) -> ChatRead:
    device = session.get(Device, chat.device_id)
    return ChatRead(
        id=chat.id,
        device_id=chat.device_id,
        device_name=device.name if device else "",
        finder_name=chat.finder_name,
        status=chat.status,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
        messages=[
            MessageRead.model_validate(m) for m in service.list_messages(session, chat.id)
        ],
    )


def _list_item(item: service.ChatSummary) -> ChatListItem:
    return ChatListItem(
        id=item.chat.id,
        device_id=item.chat.device_id,
        device_name=item.device_name,
        finder_name=item.chat.finder_name,
        status=item.chat.status,
        message_count=item.message_count,
        last_message=(
            MessageRead.model_validate(item.last_message) if item.last_message else None
        ),
        updated_at=item.chat.updated_at,
    )


def _notify(
    push: PushService,
    background_tasks: BackgroundTasks,
    recipient: User | None,
    chat: FoundObjectChat,
    body: str,
) -> None:
    if recipient:
        push.notify(
            background_tasks,
            [recipient],
            title="New message about a found object",
            body=body[:120],
            data={"type": "found_object_message", "chatId": str(chat.id)},
        )


# --- finder side ---------------------------------------------------------------


@public_router.get(
    "/qr/{qr_code}/public",
    response_class=HTMLResponse,
    responses={**CommonResponses.FORBIDDEN},
)
async def qr_landing_page(qr_code: str, session: SessionDep, settings: SettingsDep):
    """Page opened by scanning a device's QR sticker."""
    device = service.get_device_by_qr(session, qr_code)
    template = JinjaPagesEnv.get_template("qr-landing.html")
    return HTMLResponse(
        template.render(
            device_name=device.name,
            chat_endpoint=f"{settings.public_base_url}/public/{qr_code}/chat",
        )
    )


@public_router.get(
    "/public/{qr_code}/info",
    response_model=PublicDeviceInfo,
    responses={**CommonResponses.FORBIDDEN},
)
async def public_device_info(qr_code: str, session: SessionDep):
    """What a finder may know about a scanned object."""
    device = service.get_device_by_qr(session, qr_code)
    owner = session.get(User, device.user_id) if device.user_id else None
    return PublicDeviceInfo(
        device_name=device.name,
        device_type=device.type,
        owner_name=owner.display_name if owner and owner.show_name else None,
    )


@public_router.post(
    "/public/{qr_code}/chat",
    response_model=ChatStarted,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.FORBIDDEN, **CommonResponses.BAD_REQUEST},
)
async def start_chat(
    qr_code: str,
    body: ChatStart,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    """Contact the owner of a found object.

    Presenting a previously issued ``sessionId`` returns the finder's active
    chat instead of opening a second one.
    """
    chat, created = service.start_chat(
        session,
        qr_code,
        message=body.message,
        finder_name=body.finder_name,
        session_id=body.session_id,
    )
    if created:
        owner = session.get(User, chat.owner_id)
        device = session.get(Device, chat.device_id)
        if owner and device:
            push.notify(
                background_tasks,
                [owner],
                title=f"Someone found your {device.name}",
                body=body.message[:120],
                data={"type": "found_object_chat", "chatId": str(chat.id)},
            )
    return ChatStarted(chat_id=chat.id, session_id=chat.finder_session_id)


@public_router.get(
    "/public/chat/{chat_id}/session/{session_id}",
    response_model=ChatRead,
    responses={**CommonResponses.FORBIDDEN},
)
async def finder_view_chat(chat_id: uuid.UUID, session_id: str, session: SessionDep):
    """Polled by the finder for new messages."""
    chat = service.get_finder_chat(session, chat_id, session_id)
    return _chat_read(session, chat)


@public_router.post(
    "/public/chat/{chat_id}/session/{session_id}/message",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.FORBIDDEN, **CommonResponses.CONFLICT},
)
async def finder_post_message(
    chat_id: uuid.UUID,
    session_id: str,
    body: MessageCreate,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    message = service.post_finder_message(session, chat_id, session_id, body.content)
    chat = service.get_chat_or_404(session, chat_id)
    _notify(push, background_tasks, session.get(User, chat.owner_id), chat, body.content)
    return message


# --- signed-in finder ------------------------------------------------------------


@finder_router.post(
    "/contact/{qr_code}",
    response_model=RegisteredChatStarted,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.BAD_REQUEST, **CommonResponses.CONFLICT},
)
async def start_registered_chat(
    qr_code: str,
    user: CurrentUserDep,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
    body: RegisteredChatStart | None = None,
):
    """Contact the owner of a found object under the caller's own name."""
    message = body.message if body else None
    chat = service.start_registered_chat(session, user, qr_code, message)
    device = session.get(Device, chat.device_id)
    device_name = device.name if device else ""
    owner = session.get(User, chat.owner_id)
    if owner:
        push.notify(
            background_tasks,
            [owner],
            title=f"{user.display_name} found your {device_name}",
            body=message[:120] if message else "Open the app to reply",
            data={"type": "found_object_chat", "chatId": str(chat.id)},
        )
    return RegisteredChatStarted(chat_id=chat.id, device_name=device_name)


@finder_router.get("/my-finds", response_model=list[ChatListItem])
async def list_my_finds(user: CurrentUserDep, session: SessionDep):
    """Chats the caller opened as a finder, most recent first."""
    return [_list_item(item) for item in service.list_finder_chats(session, user)]


@finder_router.get("/my-finds/{chat_id}", response_model=ChatRead)
async def finder_view_own_chat(
    chat_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    chat = service.get_registered_finder_chat(session, user, chat_id)
    return _chat_read(session, chat)


@finder_router.post(
    "/my-finds/{chat_id}/message",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
async def finder_post_own_message(
    chat_id: uuid.UUID,
    body: MessageCreate,
    user: CurrentUserDep,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    message = service.post_registered_finder_message(session, user, chat_id, body.content)
    chat = service.get_chat_or_404(session, chat_id)
    _notify(push, background_tasks, session.get(User, chat.owner_id), chat, body.content)
    return message


# --- owner side ----------------------------------------------------------------


@router.get("", response_model=list[ChatListItem])
async def list_chats(
    user: CurrentUserDep,
    session: SessionDep,
    chat_status: Annotated[ChatStatus | None, Query(alias="status")] = None,
):
    """Chats about the caller's objects, most recent first."""
    return [_list_item(item) for item in service.list_owner_chats(session, user, chat_status)]


@router.get(
    "/{chat_id}",
    response_model=ChatRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def owner_view_chat(chat_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    chat = service.get_owner_chat(session, user, chat_id)
    return _chat_read(session, chat)


@router.post(
    "/{chat_id}/message",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def owner_post_message(
    chat_id: uuid.UUID,
    body: MessageCreate,
    user: CurrentUserDep,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    """Reply to the finder. Signed-in finders are notified."""
    message = service.post_owner_message(session, user, chat_id, body.content)
    chat = service.get_chat_or_404(session, chat_id)
    if chat.finder_id:
        _notify(push, background_tasks, session.get(User, chat.finder_id), chat, body.content)
    return message


@router.put(
    "/{chat_id}/status",
    response_model=ChatRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def set_chat_status(
    chat_id: uuid.UUID,
    body: ChatStatusUpdate,
    user: CurrentUserDep,
    session: SessionDep,
):
    """Mark a chat resolved or closed. Owner only, and only once."""
    chat = service.set_status(session, user, chat_id, body.status)
    return _chat_read(session, chat)
