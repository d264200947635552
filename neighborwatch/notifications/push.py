"""Push notification dispatch through the Expo push gateway.

Delivery is fire-and-forget: notifications are scheduled as background tasks
that run after the response is sent. Gateway failures are retried a few
times, then logged; they never reach the request that triggered them.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import httpx
from fastapi import BackgroundTasks

from neighborwatch.core.http import get_push_client
from neighborwatch.core.retry import with_retry
from neighborwatch.core.settings import get_settings
from neighborwatch.user.models import User

logger = logging.getLogger(__name__)

_EXPO_TOKEN_PREFIXES = ("ExponentPushToken[", "ExpoPushToken[")


def is_push_token(token: str | None) -> bool:
    return bool(token) and token.startswith(_EXPO_TOKEN_PREFIXES) and token.endswith("]")


@dataclass(frozen=True)
class PushMessage:
    to: str
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "to": self.to,
            "title": self.title,
            "body": self.body,
            "data": self.data,
            "sound": "default",
            "priority": "high",
        }


class GatewayError(Exception):
    """Retryable failure reported by the push gateway."""


class PushService:
    """Sends push notifications to users' registered devices."""

    def __init__(
        self,
        url: str,
        access_token: str | None = None,
        enabled: bool = True,
        client: httpx.AsyncClient | None = None,
    ):
        self._url = url
        self._access_token = access_token
        self._enabled = enabled
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _post(self, messages: list[PushMessage]) -> httpx.Response:
        client = self._client or get_push_client()
        response = await client.post(
            self._url,
            json=[m.to_payload() for m in messages],
            headers=self._headers(),
        )
        if response.status_code >= 500 or response.status_code == 429:
            raise GatewayError(f"Push gateway returned {response.status_code}")
        return response

    async def send(self, messages: list[PushMessage]) -> None:
        """Deliver a batch of messages; never raises."""
        if not messages:
            return
        try:
            response = await with_retry(
                lambda: self._post(messages),
                exceptions=(httpx.TransportError, GatewayError),
            )
        except (httpx.HTTPError, GatewayError) as e:
            logger.warning("Push delivery failed for %d message(s): %s", len(messages), e)
            return

        if response.is_error:
            logger.warning(
                "Push gateway rejected %d message(s): %s",
                len(messages),
                response.status_code,
            )
            return

        try:
            tickets = response.json().get("data", [])
        except ValueError:
            logger.warning("Push gateway returned a non-JSON body")
            return

        for ticket in tickets:
            if ticket.get("status") == "error":
                logger.warning("Push ticket error: %s", ticket.get("message"))

    def notify(
        self,
        background_tasks: BackgroundTasks,
        recipients: Iterable[User],
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> int:
        """Schedule a notification for every recipient with a push token.

        Returns the number of messages scheduled.
        """
        if not self._enabled:
            return 0

        messages = [
            PushMessage(to=user.push_token, title=title, body=body, data=data or {})
            for user in recipients
            if is_push_token(user.push_token)
        ]
        if messages:
            background_tasks.add_task(self.send, messages)
        return len(messages)


@lru_cache
def get_push_service() -> PushService:
    """Get cached PushService configured from settings."""
    settings = get_settings()
    return PushService(
        url=settings.expo_push_url,
        access_token=settings.expo_access_token,
        enabled=settings.push_enabled,
    )
