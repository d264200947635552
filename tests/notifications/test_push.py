"""Tests for neighborwatch/notifications/push.py."""

import json
import logging

import httpx
import pytest
from fastapi import BackgroundTasks

from neighborwatch.notifications.push import PushMessage, PushService, is_push_token
from neighborwatch.user.models import User

PUSH_URL = "https://push.example.com/--/api/v2/push/send"


def _service(handler, **kwargs) -> PushService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PushService(PUSH_URL, client=client, **kwargs)


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    monkeypatch.setattr("neighborwatch.core.retry._calculate_delay", lambda *args: 0)


@pytest.mark.parametrize(
    "token,expected",
    [
        ("ExponentPushToken[abc]", True),
        ("ExpoPushToken[abc]", True),
        ("ExponentPushToken[abc", False),
        ("fcm-token", False),
        ("", False),
        (None, False),
    ],
)
def test_is_push_token(token, expected):
    assert is_push_token(token) is expected


def test_notify_skips_users_without_token():
    service = PushService(PUSH_URL)
    background_tasks = BackgroundTasks()
    users = [
        User(external_id="a", email="a@example.com", push_token="ExponentPushToken[a]"),
        User(external_id="b", email="b@example.com"),
        User(external_id="c", email="c@example.com", push_token="garbage"),
    ]

    count = service.notify(background_tasks, users, title="Hi", body="There")

    assert count == 1
    [task] = background_tasks.tasks
    [messages] = task.args
    assert [m.to for m in messages] == ["ExponentPushToken[a]"]


def test_notify_disabled():
    service = PushService(PUSH_URL, enabled=False)
    background_tasks = BackgroundTasks()
    user = User(external_id="a", email="a@example.com", push_token="ExponentPushToken[a]")

    assert service.notify(background_tasks, [user], title="Hi", body="There") == 0
    assert background_tasks.tasks == []


def test_notify_nobody_to_reach():
    service = PushService(PUSH_URL)
    background_tasks = BackgroundTasks()

    assert service.notify(background_tasks, [], title="Hi", body="There") == 0
    assert background_tasks.tasks == []


@pytest.mark.asyncio
async def test_send_posts_batch():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"data": [{"status": "ok", "id": "t1"}]})

    service = _service(handler, access_token="secret")

    await service.send(
        [PushMessage(to="ExponentPushToken[a]", title="T", body="B", data={"k": "v"})]
    )

    [request] = requests
    assert request.headers["Authorization"] == "Bearer secret"
    assert json.loads(request.content) == [
        {
            "to": "ExponentPushToken[a]",
            "title": "T",
            "body": "B",
            "data": {"k": "v"},
            "sound": "default",
            "priority": "high",
        }
    ]


@pytest.mark.asyncio
async def test_send_retries_server_errors(caplog):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    service = _service(handler)

    with caplog.at_level(logging.WARNING, logger="neighborwatch.notifications.push"):
        await service.send([PushMessage(to="ExponentPushToken[a]", title="T", body="B")])

    assert len(calls) == 3
    assert "Push delivery failed" in caplog.text


@pytest.mark.asyncio
async def test_send_recovers_after_transient_error():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused")
        return httpx.Response(200, json={"data": [{"status": "ok"}]})

    service = _service(handler)

    await service.send([PushMessage(to="ExponentPushToken[a]", title="T", body="B")])

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_send_does_not_retry_client_errors(caplog):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(400, json={"errors": [{"message": "bad"}]})

    service = _service(handler)

    with caplog.at_level(logging.WARNING, logger="neighborwatch.notifications.push"):
        await service.send([PushMessage(to="ExponentPushToken[a]", title="T", body="B")])

    assert len(calls) == 1
    assert "rejected" in caplog.text


@pytest.mark.asyncio
async def test_send_logs_ticket_errors(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"data": [{"status": "error", "message": "DeviceNotRegistered"}]},
        )

    service = _service(handler)

    with caplog.at_level(logging.WARNING, logger="neighborwatch.notifications.push"):
        await service.send([PushMessage(to="ExponentPushToken[a]", title="T", body="B")])

    assert "DeviceNotRegistered" in caplog.text


@pytest.mark.asyncio
async def test_send_empty_batch_is_a_no_op():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("gateway must not be called")

    service = _service(handler)

    await service.send([])
