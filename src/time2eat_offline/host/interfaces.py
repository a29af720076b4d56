from __future__ import annotations

from time2eat_offline.core.models import Notification


class WindowClient:
    """An application window or tab controlled by the agent."""

    url: str

    async def focus(self) -> None:
        raise NotImplementedError


class Clients:
    async def match_all(self) -> list[WindowClient]:
        raise NotImplementedError

    async def open_window(self, url: str) -> WindowClient:
        raise NotImplementedError

    async def claim(self) -> None:
        """Take control of every open window without waiting for a reload."""
        raise NotImplementedError


class Notifier:
    async def show_notification(self, notification: Notification) -> None:
        raise NotImplementedError

    async def close(self, notification: Notification) -> None:
        raise NotImplementedError


class Host:
    async def skip_waiting(self) -> None:
        """Let the freshly installed agent replace the active one immediately."""
        raise NotImplementedError
