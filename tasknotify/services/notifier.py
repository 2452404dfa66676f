from typing import Optional, Protocol

import httpx

from ..config import Settings
from ..errors import NotifyError
from ..logging_config import get_logger
from ..models import Notification

logger = get_logger(__name__)

# Pushover rejects longer values
MAX_TITLE_LENGTH = 250
MAX_MESSAGE_LENGTH = 1024


class Notifier(Protocol):
    async def notify(self, notification: Notification) -> None:
        ...


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


class PushoverNotifier:
    """Delivers notifications through the Pushover messages API.

    Failures are raised as ``NotifyError`` and never retried here.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.api_url = settings.pushover_api_url
        self.user = settings.pushover_user
        self.token = settings.pushover_token
        self.timeout = settings.notify_timeout_seconds
        self._client = client

    def payload(self, notification: Notification) -> dict:
        data = {
            "token": self.token,
            "user": self.user,
            "title": _clip(notification.title, MAX_TITLE_LENGTH),
            "message": _clip(notification.body, MAX_MESSAGE_LENGTH),
        }
        if notification.url:
            data["url"] = notification.url
            if notification.url_title:
                data["url_title"] = notification.url_title
        return data

    async def notify(self, notification: Notification) -> None:
        if not self.user or not self.token:
            raise NotifyError("Pushover credentials are not configured")

        try:
            if self._client is not None:
                resp = await self._client.post(self.api_url, data=self.payload(notification), timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(self.api_url, data=self.payload(notification))
        except httpx.HTTPError as exc:
            raise NotifyError(f"Pushover request failed: {exc}") from exc

        try:
            reply = resp.json()
        except ValueError:
            reply = {}
        if not isinstance(reply, dict):
            reply = {}

        if not resp.is_success or reply.get("status") != 1:
            errors = reply.get("errors") or [resp.text[:200]]
            raise NotifyError(
                f"Pushover rejected the message: {'; '.join(str(e) for e in errors)}",
                status_code=resp.status_code,
            )

        logger.info("notification_sent", title=notification.title, request=reply.get("request"))
