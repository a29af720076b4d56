from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass, field

from time2eat_offline.core.models import Notification, resolve_url
from time2eat_offline.host.interfaces import Clients, Host, Notifier, WindowClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LocalWindowClient(WindowClient):
    url: str
    focused: bool = False
    controlled: bool = False

    async def focus(self) -> None:
        self.focused = True
        logger.info("Window focused. url=%s", self.url)


class LocalClients(Clients):
    """
    Window bookkeeping for the command-line host.

    When launch_browser is set, opening a window hands the URL to the system
    browser via the webbrowser module.
    """

    def __init__(self, *, origin: str, launch_browser: bool = False) -> None:
        self._origin = origin
        self._launch_browser = launch_browser
        self.windows: list[LocalWindowClient] = []

    async def match_all(self) -> list[WindowClient]:
        return list(self.windows)

    async def open_window(self, url: str) -> WindowClient:
        absolute = resolve_url(self._origin, url)
        for window in self.windows:
            window.focused = False
        window = LocalWindowClient(url=absolute, focused=True, controlled=True)
        self.windows.append(window)
        logger.info("Window opened. url=%s", absolute)
        if self._launch_browser:
            webbrowser.open(absolute)
        return window

    async def claim(self) -> None:
        for window in self.windows:
            window.controlled = True


@dataclass(slots=True)
class LoggingNotifier(Notifier):
    shown: list[Notification] = field(default_factory=list)

    async def show_notification(self, notification: Notification) -> None:
        self.shown.append(notification)
        logger.info(
            "Notification shown. title=%s body=%s actions=%s",
            notification.title,
            notification.options.body,
            ",".join(action.action for action in notification.options.actions),
        )

    async def close(self, notification: Notification) -> None:
        self.shown = [item for item in self.shown if item.id != notification.id]


@dataclass(slots=True)
class LocalHost(Host):
    skipped_waiting: bool = False

    async def skip_waiting(self) -> None:
        self.skipped_waiting = True
