from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from time2eat_offline.config.models import NotificationSettings
from time2eat_offline.core.models import (
    Notification,
    NotificationAction,
    NotificationClick,
    NotificationOptions,
    resolve_url,
)
from time2eat_offline.core.utils import epoch_millis, utc_now
from time2eat_offline.host.interfaces import Clients, Notifier, WindowClient

logger = logging.getLogger(__name__)

VIEW_ACTION = "view"
CLOSE_ACTION = "close"


def _same_location(left: str, right: str) -> bool:
    a = urlsplit(left)
    b = urlsplit(right)
    return (a.scheme, a.netloc.lower(), a.path or "/") == (b.scheme, b.netloc.lower(), b.path or "/")


class PushPresenter:
    def __init__(
        self,
        *,
        settings: NotificationSettings,
        origin: str,
        notifier: Notifier,
        clients: Clients,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._settings = settings
        self._origin = origin
        self._notifier = notifier
        self._clients = clients
        self._clock = clock

    def default_options(self) -> NotificationOptions:
        settings = self._settings
        return NotificationOptions(
            body=settings.body,
            icon=settings.icon,
            badge=settings.badge,
            vibrate=list(settings.vibrate),
            data={
                "dateOfArrival": epoch_millis(self._clock()),
                "primaryKey": settings.primary_key,
            },
            actions=[
                NotificationAction(action=item.action, title=item.title, icon=item.icon)
                for item in settings.actions
            ],
        )

    def _decode_payload(self, payload: bytes) -> Optional[dict[str, Any]]:
        try:
            data = json.loads(payload.decode("utf-8"))
        except ValueError as e:
            logger.warning("Ignoring push payload that is not valid JSON. error=%s", e)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring push payload that is not a JSON object. type=%s", type(data).__name__)
            return None
        return data

    def build_notification(self, payload: Optional[bytes]) -> Notification:
        options = self.default_options()
        if payload:
            data = self._decode_payload(payload)
            if data is not None:
                message = data.get("message")
                if isinstance(message, str) and message:
                    options.body = message
                options.data = {**options.data, **data}
        return Notification(title=self._settings.title, options=options)

    async def on_push(self, payload: Optional[bytes]) -> Notification:
        logger.info("Push notification received. has_payload=%s", bool(payload))
        notification = self.build_notification(payload)
        await self._notifier.show_notification(notification)
        return notification

    async def on_click(self, click: NotificationClick) -> Optional[WindowClient]:
        logger.info("Notification clicked. action=%s", click.action or "default")
        await self._notifier.close(click.notification)

        if click.action == CLOSE_ACTION:
            return None
        if click.action == VIEW_ACTION:
            return await self._focus_or_open(self._settings.view_url)
        return await self._focus_or_open(self._settings.default_url)

    async def _focus_or_open(self, url: str) -> WindowClient:
        target = resolve_url(self._origin, url)
        for client in await self._clients.match_all():
            if _same_location(client.url, target):
                await client.focus()
                return client
        return await self._clients.open_window(target)
